"""
Weather Tool

Returns a weather report for a location. The data is a fixed mock report;
no weather service is called.
"""

from typing import Any

from assistant_gateway.models.domain import RegisteredTool, ToolDefinition


WEATHER_DEFINITION = ToolDefinition(
    name="getWeather",
    description="Get current weather information for a specific location.",
    instructions="Use this tool to get weather information for users based on their location.",
    parameters={
        "type": "object",
        "properties": {
            "location": {
                "type": "string",
                "description": "The city or location to get weather for "
                "(e.g., 'New York', 'London', 'Tokyo')",
            },
            "units": {
                "type": "string",
                "enum": ["celsius", "fahrenheit"],
                "description": "Temperature units (default: celsius)",
                "default": "celsius",
            },
        },
        "required": ["location"],
    },
)


async def get_weather(args: dict[str, Any]) -> dict[str, Any]:
    """
    Build the weather report for ``args["location"]``.

    Raises:
        ValueError: If no location is given or the units are unknown.
    """
    location = args.get("location")
    if not location:
        raise ValueError("location is required")

    units = args.get("units") or "celsius"
    if units not in ("celsius", "fahrenheit"):
        raise ValueError(f"Unsupported units: {units}")

    temperature = "72°F" if units == "fahrenheit" else "22°C"
    weather = {
        "location": location,
        "temperature": temperature,
        "condition": "Partly cloudy",
        "humidity": "65%",
        "windSpeed": "10 mph",
        "description": f"The weather in {location} is partly cloudy "
        f"with a temperature of {temperature}.",
    }

    return {
        "success": True,
        "operation": "getWeather",
        "weather": weather,
        "location": location,
        "units": units,
        "message": "Weather information retrieved successfully",
    }


TOOL = RegisteredTool(definition=WEATHER_DEFINITION, handler=get_weather)
