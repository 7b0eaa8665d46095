import json

from formconvert.ai.example_client_adapter import ExampleClientAdapter
from formconvert.ai.models import ImageInput


class TestExampleClientAdapter:
    def test_image_request_returns_vision_payload(self) -> None:
        raw = ExampleClientAdapter().create_chat_completion(
            model="example",
            temperature=0.0,
            system_prompt="",
            user_prompt="describe",
            images=[ImageInput(data=b"x", media_type="image/png")],
        )
        payload = json.loads(raw)
        assert payload["title"] == "Client Intake"
        assert len(payload["fields"]) == 2

    def test_text_request_returns_field_payload(self) -> None:
        raw = ExampleClientAdapter().create_chat_completion(
            model="example", temperature=0.0, system_prompt="", user_prompt="fields"
        )
        payload = json.loads(raw)
        assert payload["suggestedFormType"] == "INTAKE"
        assert payload["fields"] == []
