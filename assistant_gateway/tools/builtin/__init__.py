"""
Built-in Tools Package

Each module in this package exports a module-level ``TOOL`` that discovery
registers at startup:

- weather: getWeather (mock weather report)
- horoscope: get_horoscope (horoscope per astrological sign)
- instagram: generateInstagramCaption (caption, hashtags and posting advice)
- google_calendar: googleCalendar (identity-scoped Calendar v3 operations)
- gmail: gmail (identity-scoped Gmail v1 operations)
- google_sheets: googleSheets (identity-scoped Sheets v4 operations)

Modules starting with an underscore hold shared helpers and are not scanned.
"""

from assistant_gateway.tools.builtin.gmail import GMAIL_DEFINITION
from assistant_gateway.tools.builtin.google_calendar import CALENDAR_DEFINITION
from assistant_gateway.tools.builtin.google_sheets import SHEETS_DEFINITION
from assistant_gateway.tools.builtin.horoscope import HOROSCOPE_DEFINITION, get_horoscope
from assistant_gateway.tools.builtin.instagram import (
    CAPTION_DEFINITION,
    generate_instagram_caption,
)
from assistant_gateway.tools.builtin.weather import WEATHER_DEFINITION, get_weather

__all__ = [
    "WEATHER_DEFINITION",
    "get_weather",
    "HOROSCOPE_DEFINITION",
    "get_horoscope",
    "CAPTION_DEFINITION",
    "generate_instagram_caption",
    "CALENDAR_DEFINITION",
    "GMAIL_DEFINITION",
    "SHEETS_DEFINITION",
]
