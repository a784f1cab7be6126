# pawpal/services/test_content_service.py
import httpx
import openai
import pytest

from conftest import PNG_BYTES, make_openai_client
from pawpal.core.errors import NetworkTimeout, ServiceError
from pawpal.models.chat import AssistantTurn
from pawpal.services.content_service import PAWPAL_SYSTEM_INSTRUCTION, ContentService


@pytest.fixture
def openai_client():
    return make_openai_client(text="Brush teeth weekly.")


@pytest.fixture
def content(openai_client):
    return ContentService(client=openai_client, text_model='test-text-model')


def test_generate_text_uses_persona(content, openai_client):
    assert content.generate_text("dental care?") == "Brush teeth weekly."

    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs['model'] == 'test-text-model'
    assert kwargs['messages'][0] == {"role": "system", "content": PAWPAL_SYSTEM_INSTRUCTION}
    assert kwargs['messages'][-1] == {"role": "user", "content": "dental care?"}


def test_timeout_is_surfaced_as_network_timeout(content, openai_client):
    request = httpx.Request('POST', 'https://api.openai.com/v1/chat/completions')
    openai_client.chat.completions.create.side_effect = openai.APITimeoutError(request=request)
    with pytest.raises(NetworkTimeout):
        content.generate_text("hello")


def test_fallback_on_failure_or_empty_text(content, openai_client):
    openai_client.chat.completions.create.side_effect = openai.OpenAIError("quota")
    assert content.generate_text_or_fallback("insights", "Analysis busy.") == "Analysis busy."

    openai_client.chat.completions.create.side_effect = None
    openai_client.chat.completions.create.return_value.choices[0].message.content = ''
    assert content.generate_text_or_fallback("insights", "Analysis busy.") == "Analysis busy."


def test_chat_accepts_both_history_shapes(content, openai_client):
    history = [
        AssistantTurn.from_payload({"role": "user", "content": "My cat sneezes."}),
        AssistantTurn.from_payload({"role": "model", "parts": [{"text": "How often?"}]}),
    ]

    content.chat("Twice a day.", history)

    messages = openai_client.chat.completions.create.call_args.kwargs['messages']
    assert messages[1:] == [
        {"role": "user", "content": "My cat sneezes."},
        {"role": "assistant", "content": "How often?"},
        {"role": "user", "content": "Twice a day."},
    ]


def test_generate_image_decodes_base64(content, openai_client):
    assert content.generate_image("a dog") == PNG_BYTES
    assert content.generate_image("a dog", reference_image=b'ref') == PNG_BYTES
    assert openai_client.images.edit.call_args.kwargs['image'][1] == b'ref'


def test_empty_image_result_is_a_service_error(content, openai_client):
    openai_client.images.generate.return_value.data = []
    with pytest.raises(ServiceError):
        content.generate_image("a dog")


def test_init_app_requires_api_key(app):
    app.config['OPENAI_API_KEY'] = None
    with pytest.raises(ValueError):
        ContentService().init_app(app)
