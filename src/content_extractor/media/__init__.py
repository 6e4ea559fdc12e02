"""Media acquisition and transcription.

Modules:
    pipeline     transcribe_video(url, platform) -> str
    download     direct media download, yt-dlp command-line fallback
    audio        ffmpeg audio extraction
    transcribe   URL transcription services, OpenAI Whisper API
    local_model  faster-whisper on CPU
    process      cancellable subprocess runner, yt-dlp invocation
"""
