"""All magic values live here — no inline literals anywhere else."""

# Transcription endpoint defaults
DEFAULT_ENDPOINT_URL = "http://localhost:3000"
TRANSCRIPTIONS_PATH = "audio/transcriptions"
WHISPER_MODEL = "whisper-1"
DEFAULT_TIMEOUT_SECONDS: float = 120.0
DEFAULT_RESPONSE_FORMAT = "json"
DEFAULT_TRANSCRIPT_DIR = "transcripts"
# Keyless self-hosted servers still get an Authorization header the SDK can build.
ANONYMOUS_API_KEY = "anonymous"

# Media
DEFAULT_MEDIA_STEM = "media"
SNIFF_BYTES = 64
TELEGRAM_DOWNLOAD_LIMIT_BYTES = 20 * 1024 * 1024
TELEGRAM_MESSAGE_LIMIT = 4096

# Telegram chat action re-send interval (seconds).
# The action expires after ~5 s, so we refresh every 4 s.
TELEGRAM_BUSY_INTERVAL: float = 4.0

# Saved transcripts
TRANSCRIPT_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
TRANSCRIPT_EXTENSIONS = {
    "text": "txt",
    "json": "txt",
    "srt": "srt",
    "vtt": "vtt",
    "verbose_json": "json",
}
VTT_HEADER = "WEBVTT"

# Log messages
MSG_BOT_STARTING = "Starting transcription bot…"
MSG_BLOCKED_CHAT = "Blocked update from chat_id: %s"
MSG_TRANSCRIBING = "Transcribing %s (%s, %.2f MB) → %s"
MSG_TRANSCRIBED = "✓ Transcribed %s (%.1fs)"
MSG_TRANSCRIBE_FAIL = "✗ Transcription failed (%.1fs): %s"
MSG_SEND_FAIL = "Telegram send failed: %s"

# User-facing replies
MSG_SEND_MEDIA = "Send me a video or audio file and I will transcribe it."
MSG_NO_SPEECH = "Cannot find any meaningful transcription"
MSG_FILE_TOO_LARGE = "That file is %.1f MB; bots can only download files up to 20 MB."
MSG_DOWNLOAD_FAILED = "Could not download that file from Telegram, please send it again."
MSG_UNEXPECTED_FAILURE = "Transcription failed unexpectedly, please try again."
MSG_NOTHING_TO_RETRY = "Nothing to retry yet, send a video first."
MSG_NOTHING_TO_SAVE = "Nothing to save yet, transcribe something first."
MSG_NOTHING_TO_CANCEL = "No transcription is running."
MSG_CANCELLING = "Cancelling %d transcription(s)…"
MSG_SAVED = "Saved %s"
MSG_SAVE_FAILED = "Failed to save transcription"

# Error kinds → one sentence each
MSG_ERR_INVALID = "Cannot transcribe that: %s."
MSG_ERR_UNREACHABLE = "Failed to connect to the transcription server."
MSG_ERR_TIMEOUT = "The transcription server took too long, use /retry to try again."
MSG_ERR_CANCELLED = "Transcription cancelled."
MSG_ERR_REJECTED = "The transcription server refused the request (%d): %s"
MSG_ERR_MALFORMED = "The transcription server sent a reply I could not read."

# Commands
CMD_HELP = "help"
CMD_STATUS = "status"
CMD_FORMAT = "format"
CMD_LANGUAGE = "language"
CMD_TEMPERATURE = "temperature"
CMD_TIMESTAMPS = "timestamps"
CMD_RETRY = "retry"
CMD_CANCEL = "cancel"
CMD_SAVE = "save"

ARG_AUTO = "auto"
ARG_DEFAULT = "default"
ARG_OFF = "off"

MSG_FORMAT_USAGE = "Usage: /format text|json|srt|vtt|verbose_json"
MSG_FORMAT_SET = "Response format set to: %s"
MSG_LANGUAGE_USAGE = "Usage: /language <two-letter code>|auto"
MSG_LANGUAGE_SET = "Language set to: %s"
MSG_TEMPERATURE_USAGE = "Usage: /temperature <0..1>|default"
MSG_TEMPERATURE_SET = "Temperature set to: %s"
MSG_TIMESTAMPS_USAGE = "Usage: /timestamps word|segment [word|segment]|off"
MSG_TIMESTAMPS_SET = "Timestamps set to: %s"
MSG_TIMESTAMPS_NEED_VERBOSE = "Timings are only returned with /format verbose_json; the current format is %s."

MSG_STATUS = (
    "Status\n"
    "  Endpoint     : %s\n"
    "  Format       : %s\n"
    "  Language     : %s\n"
    "  Temperature  : %s\n"
    "  Timestamps   : %s\n"
    "  In flight    : %d\n"
)

MSG_HELP = (
    "vidscribe — video transcription on Telegram\n"
    "\n"
    "Send a video, video note, voice message or audio file.\n"
    "A caption is passed to the recogniser as a hint.\n"
    "\n"
    "Commands:\n"
    "  /help                       — show this message\n"
    "  /status                     — current settings at a glance\n"
    "  /format <fmt>               — text, json, srt, vtt or verbose_json\n"
    "  /language <code|auto>       — e.g. /language en\n"
    "  /temperature <0..1|default> — sampling temperature\n"
    "  /timestamps <word segment|off> — timings (verbose_json only)\n"
    "  /retry                      — transcribe the last file again\n"
    "  /cancel                     — stop running transcriptions\n"
    "  /save                       — get the last transcript as a file\n"
)
