"""All magic numbers and configuration constants."""

DUCK_VOLUME = 0.2                   # music volume during speech (20% of original)
NORMAL_VOLUME = 1.0                 # music volume outside speech
FADE_IN_SECONDS = 0.1               # ramp back up after speech (pulse mode only)
FADE_OUT_SECONDS = 0.1              # ramp down before speech (pulse mode only)
PULSE_WIDTH_SECONDS = 0.001         # width of each keyframe pulse window
OUTPUT_DIR = "output"
OUTPUT_CODEC = "libmp3lame"         # ffmpeg audio encoder
OUTPUT_BITRATE = "192k"             # MP3 output bitrate
OUTPUT_SUFFIX = "_ducked"           # appended to the music stem for default output names
FILTER_MODES = ("step", "pulse")
DEFAULT_MODE = "step"
BACKENDS = ("pydub", "ffmpeg", "dry-run")
DEFAULT_BACKEND = "pydub"
VERSION = "0.1.0"
