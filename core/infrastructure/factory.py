from .services import DataSanitizer, SystemClock

_data_sanitizer = None
_clock = None


async def get_data_sanitizer() -> DataSanitizer:
    """Provide a singleton `DataSanitizer` instance.

    Returns
    -------
    DataSanitizer
        Instance of `DataSanitizer`.
    """
    global _data_sanitizer

    if _data_sanitizer is None:
        _data_sanitizer = DataSanitizer()

    return _data_sanitizer


async def get_clock() -> SystemClock:
    """Provide a singleton `SystemClock` instance.

    Returns
    -------
    SystemClock
        Instance of `SystemClock`.
    """
    global _clock

    if _clock is None:
        _clock = SystemClock()

    return _clock
