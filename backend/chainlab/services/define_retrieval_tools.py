"""Retrieval and Weather Tool Schemas — knowledge_base, get_weather, compare_weather."""

TOOL_KNOWLEDGE_BASE = {
    "name": "knowledge_base",
    "description": (
        "Searches the uploaded-document knowledge base for passages relevant to "
        "the query. Input is the user's question or search text."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Search text"},
        },
        "required": ["query"],
    },
}

TOOLS_WEATHER = [
    {
        "name": "get_weather",
        "description": (
            "Gets the current weather and the forecast for today and tomorrow for one city."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "city": {
                    "type": "string",
                    "description": "City name, e.g. Beijing, Shanghai, Guangzhou",
                },
            },
            "required": ["city"],
        },
    },
    {
        "name": "compare_weather",
        "description": "Compares the weather of several cities side by side.",
        "input_schema": {
            "type": "object",
            "properties": {
                "cities": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 1,
                    "description": "City names to compare",
                },
            },
            "required": ["cities"],
        },
    },
]
