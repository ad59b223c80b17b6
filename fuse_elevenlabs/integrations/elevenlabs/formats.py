from typing import NamedTuple, Optional


class AudioFormat(NamedTuple):
    mime_type: str
    extension: str


DEFAULT_AUDIO_FORMAT = AudioFormat("audio/mpeg", "mp3")

# Exact output_format values
AUDIO_FORMATS = {
    "flac": AudioFormat("audio/flac", "flac"),
    "opus": AudioFormat("audio/opus", "opus"),
    "ulaw": AudioFormat("audio/basic", "au"),
    "mulaw": AudioFormat("audio/basic", "au"),
}

# Families such as pcm_16000, pcm_44100
AUDIO_FORMAT_PREFIXES = {
    "pcm_": AudioFormat("audio/wav", "wav"),
}


def resolve_audio_format(output_format: Optional[str]) -> AudioFormat:
    """
    Map an ElevenLabs output_format option to the MIME type and file extension
    of the audio it produces. Unknown or empty formats are treated as MP3.
    """
    if not output_format:
        return DEFAULT_AUDIO_FORMAT

    key = output_format.strip().lower()
    if key in AUDIO_FORMATS:
        return AUDIO_FORMATS[key]

    for prefix, audio_format in AUDIO_FORMAT_PREFIXES.items():
        if key.startswith(prefix):
            return audio_format

    return DEFAULT_AUDIO_FORMAT


# Select options offered by the audio-producing nodes
OUTPUT_FORMAT_OPTIONS = [
    ("MP3 44.1kHz 128kbps", "mp3_44100_128"),
    ("FLAC", "flac"),
    ("WAV (PCM 16kHz)", "pcm_16000"),
    ("PCM 16-bit 22.05kHz", "pcm_22050"),
    ("PCM 16-bit 24kHz", "pcm_24000"),
    ("PCM 16-bit 44.1kHz", "pcm_44100"),
]

TTS_OUTPUT_FORMAT_OPTIONS = OUTPUT_FORMAT_OPTIONS + [
    ("Opus", "opus"),
    ("u-law", "ulaw"),
    ("mu-law", "mulaw"),
]
