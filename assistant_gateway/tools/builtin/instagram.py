"""
Instagram Caption Tool

Content-generation tool composing an Instagram caption, hashtags and posting
advice for a topic. Everything is generated locally from templates.
"""

import random
import re
from typing import Any

from assistant_gateway.models.domain import RegisteredTool, ToolDefinition

TONE_OPENERS: dict[str, list[str]] = {
    "casual": ["Hey there!", "OMG!", "So excited to share", "You guys!", "Quick thought:"],
    "professional": [
        "Excited to announce",
        "Proud to share",
        "We're thrilled to",
        "Important update:",
    ],
    "funny": ["Plot twist:", "Breaking news:", "Hot take:", "Unpopular opinion:", "Life hack:"],
    "inspirational": [
        "Remember:",
        "Here's what I learned",
        "Today's reminder:",
        "Moment of truth:",
    ],
    "romantic": [
        "Love this moment",
        "Feeling grateful for",
        "Blessed to have",
        "Heart full of",
    ],
    "adventurous": [
        "Adventure awaits!",
        "Exploring new horizons",
        "Stepping out of comfort zone",
        "New chapter begins!",
    ],
}

CALLS_TO_ACTION = [
    "Drop a ❤️ if you agree!",
    "What do you think? Comment below!",
    "Save this for later!",
    "Share with someone who needs this!",
    "Follow for more tips!",
    "Tag a friend who would love this!",
]

BASE_HASHTAGS = ["#instagram", "#socialmedia", "#contentcreator", "#digitalmarketing", "#lifestyle"]
TRENDING_HASHTAGS = ["#trending", "#viral", "#fyp", "#explore", "#discover"]

OPTIMAL_TIMING = {
    "best_days": ["Tuesday", "Wednesday", "Thursday"],
    "best_times": ["9:00 AM", "12:00 PM", "3:00 PM", "7:00 PM"],
    "timezone": "EST",
    "frequency": "1-2 posts per day",
}

VISUAL_SUGGESTIONS = [
    "High-quality image with good lighting",
    "Bright, vibrant colors that pop",
    "Clean composition with clear focal point",
    "Include people or relatable elements",
    "Use natural filters for authenticity",
]

ENGAGEMENT_STRATEGIES = [
    "Ask questions in your caption",
    "Use location tags when relevant",
    "Tag relevant accounts or brands",
    "Create shareable content",
    "Use trending audio for reels",
    "Post at optimal times for your audience",
]

CAPTION_DEFINITION = ToolDefinition(
    name="generateInstagramCaption",
    description="Generate engaging Instagram captions for posts",
    instructions="""Use this tool to create Instagram captions. Always generate:
1. Engaging captions that match the platform's style (casual, visual, hashtag-heavy)
2. Relevant hashtags (5-15 hashtags)
3. Post timing recommendations

Instagram best practices:
- Use emojis strategically
- Include call-to-actions
- Keep captions under 2200 characters""",
    parameters={
        "type": "object",
        "properties": {
            "topic": {
                "type": "string",
                "description": "The main topic or theme of the Instagram post",
            },
            "tone": {
                "type": "string",
                "description": "The tone of the caption",
                "enum": list(TONE_OPENERS),
            },
            "hashtags": {
                "type": "boolean",
                "description": "Whether to include relevant hashtags (default: true)",
            },
        },
        "required": ["topic"],
    },
)


def generate_caption(topic: str, tone: str) -> str:
    opener = random.choice(TONE_OPENERS.get(tone, TONE_OPENERS["casual"]))
    return (
        f"{opener}\n\n"
        f"Today we're talking about {topic.lower()}!\n\n"
        "Whether you're just starting out or you're a pro, this is for you.\n\n"
        f"{random.choice(CALLS_TO_ACTION)}"
    )


def generate_hashtags(topic: str) -> list[str]:
    slug = re.sub(r"\s+", "", topic.lower())
    topic_tags = [f"#{slug}", f"#{slug}tips", f"#{slug}community", f"#{slug}life"]
    return [*BASE_HASHTAGS, *topic_tags, *TRENDING_HASHTAGS]


def generate_instagram_caption(args: dict[str, Any]) -> dict[str, Any]:
    """
    Compose a caption for ``args["topic"]``.

    Raises:
        ValueError: If no topic is given.
    """
    topic = (args.get("topic") or "").strip()
    if not topic:
        raise ValueError("topic is required")

    caption = generate_caption(topic, args.get("tone") or "casual")
    hashtags = generate_hashtags(topic) if args.get("hashtags", True) else []
    return {
        "success": True,
        "caption": caption,
        "hashtags": hashtags,
        "optimal_timing": dict(OPTIMAL_TIMING),
        "visual_suggestions": list(VISUAL_SUGGESTIONS),
        "engagement_strategies": list(ENGAGEMENT_STRATEGIES),
        "character_count": len(caption),
        "hashtag_count": len(hashtags),
    }


TOOL = RegisteredTool(definition=CAPTION_DEFINITION, handler=generate_instagram_caption)
