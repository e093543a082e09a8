from types import SimpleNamespace

from google.genai import types

TEST_MODEL = "gemini-2.5-flash"
VALID_JSON = '{"shoe_type": "Sneaker, medium thickness", "recommended_time_minutes": 40}'


def text_response(text):
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)])),
        ]
    )


def blocked_response(reason=types.BlockedReason.SAFETY):
    return types.GenerateContentResponse(
        prompt_feedback=types.GenerateContentResponsePromptFeedback(
            block_reason=reason,
            safety_ratings=[
                types.SafetyRating(
                    category=types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
                    probability=types.HarmProbability.HIGH,
                    blocked=True,
                ),
            ],
        )
    )


def empty_response():
    return types.GenerateContentResponse(candidates=[])


class FakeModels:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def generate_content(self, *, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeClient:
    """Stands in for genai.Client; only the async models surface is used."""

    def __init__(self, response=None):
        self.models = FakeModels(response if response is not None else text_response(VALID_JSON))
        self.aio = SimpleNamespace(models=self.models)
