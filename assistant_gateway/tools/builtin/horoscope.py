"""
Horoscope Tool

Content-generation tool returning today's horoscope for an astrological sign.
"""

from typing import Any

from assistant_gateway.models.domain import RegisteredTool, ToolDefinition


HOROSCOPE_DEFINITION = ToolDefinition(
    name="get_horoscope",
    description="Get today's horoscope for an astrological sign.",
    instructions="Use this tool to get horoscope predictions for users based on "
    "their astrological sign.",
    parameters={
        "type": "object",
        "properties": {
            "sign": {
                "type": "string",
                "description": "An astrological sign like Taurus or Aquarius",
            },
        },
        "required": ["sign"],
    },
)

HOROSCOPES = {
    "aquarius": "Next Tuesday you will befriend a baby otter and discover a hidden "
    "talent for underwater basket weaving.",
    "pisces": "Your intuition will guide you to a life-changing decision involving "
    "a mysterious stranger and a talking fish.",
    "aries": "Your bold nature will lead you to start a new adventure that involves "
    "fire, excitement, and possibly a dragon.",
    "taurus": "Your practical approach will help you build something beautiful that "
    "will last for generations.",
    "gemini": "Your dual nature will help you see both sides of an important "
    "decision that's coming your way.",
    "cancer": "Your caring nature will be rewarded when someone you helped returns "
    "the favor in an unexpected way.",
    "leo": "Your natural leadership will shine when you're called upon to guide "
    "others through a challenging situation.",
    "virgo": "Your attention to detail will help you solve a puzzle that has "
    "stumped everyone else.",
    "libra": "Your sense of balance will help you mediate a conflict and bring "
    "harmony to a difficult situation.",
    "scorpio": "Your intensity will help you uncover a secret that changes "
    "everything you thought you knew.",
    "sagittarius": "Your adventurous spirit will lead you to a journey that expands "
    "your horizons beyond imagination.",
    "capricorn": "Your determination will help you achieve a goal that seemed "
    "impossible to others.",
}

FALLBACK_HOROSCOPE = (
    "The stars are aligning in mysterious ways. Trust your instincts and be open "
    "to unexpected opportunities."
)


def get_horoscope(args: dict[str, Any]) -> dict[str, Any]:
    sign = str(args.get("sign") or "").strip()
    if not sign:
        raise ValueError("sign is required")

    text = HOROSCOPES.get(sign.lower(), FALLBACK_HOROSCOPE)
    return {
        "success": True,
        "operation": "get_horoscope",
        "horoscope": f"{sign.capitalize()}: {text}",
        "sign": sign,
        "message": "Horoscope retrieved successfully",
    }


TOOL = RegisteredTool(definition=HOROSCOPE_DEFINITION, handler=get_horoscope)
