"""Supported language tables for the provider catalog.

All codes are ISO-639-1. An empty table on a model means "every code".
"""

WHISPER_LANGUAGES: tuple[str, ...] = (
    "af", "ar", "hy", "az", "be", "bs", "bg", "ca", "zh", "hr", "cs", "da",
    "nl", "en", "et", "fi", "fr", "gl", "de", "el", "he", "hi", "hu", "is",
    "id", "it", "ja", "kn", "kk", "ko", "lv", "lt", "mk", "ms", "mr", "mi",
    "ne", "no", "fa", "pl", "pt", "ro", "ru", "sr", "sk", "sl", "es", "sw",
    "sv", "tl", "ta", "th", "tr", "uk", "ur", "vi", "cy",
)

ENGLISH_ONLY: tuple[str, ...] = ("en",)

DEEPGRAM_NOVA3_LANGUAGES: tuple[str, ...] = (
    "ar", "be", "bs", "bg", "ca", "hr", "cs", "da", "nl", "en", "et", "fi",
    "fr", "de", "el", "hi", "hu", "id", "it", "ja", "kn", "ko", "lv", "lt",
    "mk", "ms", "mr", "no", "pl", "pt", "ro", "ru", "sr", "sk", "sl", "es",
    "sv", "tl", "ta", "tr", "uk", "vi",
)

DEEPGRAM_NOVA2_LANGUAGES: tuple[str, ...] = (
    "bg", "ca", "zh", "cs", "da", "nl", "en", "et", "fi", "fr", "de", "el",
    "hi", "hu", "id", "it", "ja", "ko", "lv", "lt", "ms", "no", "pl", "pt",
    "ro", "ru", "sk", "es", "sv", "th", "tr", "uk", "vi",
)

ELEVENLABS_LANGUAGES: tuple[str, ...] = (
    "be", "bs", "bg", "ca", "hr", "cs", "da", "nl", "en", "et", "fi", "fr",
    "gl", "de", "el", "hu", "is", "id", "it", "ja", "kn", "lv", "mk", "ms",
    "ml", "no", "pl", "pt", "ro", "ru", "sk", "es", "sv", "tr", "uk", "vi",
    "hy", "az", "bn", "ka", "gu", "hi", "kk", "lt", "mt", "zh", "mr", "ne",
    "or", "fa", "sr", "sl", "sw", "ta", "te", "af", "ar", "as", "my", "ha",
    "he", "jv", "ko", "ky", "lb", "mi", "oc", "pa", "tg", "th", "uz", "cy",
    "am", "lg", "ig", "ga", "km", "ku", "lo", "mn", "ps", "sn", "sd", "so",
    "ur", "wo", "xh", "yo", "zu",
)
