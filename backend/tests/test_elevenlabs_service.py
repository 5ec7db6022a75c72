"""
NotesWise Backend: ElevenLabs Service Tests
=============================================

What we test:
    ✅ Request format (voice URL, xi-api-key, model and voice settings)
    ✅ Unknown voices fall back to the default voice
    ✅ Success returns base64 of the response bytes
    ✅ Non-2xx and transport errors raise AudioSynthesisError
    ✅ Missing API key is a configuration error
"""

import base64

import httpx
import pytest

from app.exceptions import AudioSynthesisError, ConfigurationError, ValidationError
from app.services.elevenlabs_service import VOICES, ElevenLabsService

AUDIO_BYTES = b"ID3\x03\x00fake-mpeg-frames"
BURT_ID = "4YYIPFl9wE5c4L2eu2Gb"


@pytest.fixture
def service(transport_options):
    return ElevenLabsService(
        api_key="el-secret",
        base_url="https://api.elevenlabs.test/",
        options=transport_options,
    )


class TestConfiguration:

    def test_empty_key_rejected(self, transport_options):
        with pytest.raises(ConfigurationError):
            ElevenLabsService(api_key="", options=transport_options)

    def test_available_voices(self):
        assert ElevenLabsService.available_voices() == ["burt"]

    @pytest.mark.parametrize("voice", ["burt", "BURT", "nonexistent", "", None])
    def test_voice_resolution_falls_back(self, voice):
        assert ElevenLabsService.resolve_voice(voice) == VOICES["burt"] == BURT_ID


class TestSynthesize:

    @pytest.mark.asyncio
    async def test_success_returns_base64(self, service, mock_backend):
        mock_backend.reply(content=AUDIO_BYTES)

        audio = await service.synthesize("Mitochondria produce ATP.", "burt")

        assert base64.b64decode(audio) == AUDIO_BYTES

        request = mock_backend.last_request
        assert str(request.url) == f"https://api.elevenlabs.test/v1/text-to-speech/{BURT_ID}"
        assert request.headers["xi-api-key"] == "el-secret"
        assert mock_backend.last_json() == {
            "text": "Mitochondria produce ATP.",
            "model_id": "eleven_multilingual_v2",
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
        }

    @pytest.mark.asyncio
    async def test_unknown_voice_uses_default_id(self, service, mock_backend):
        mock_backend.reply(content=AUDIO_BYTES)

        await service.synthesize("hello", "morgan")

        assert mock_backend.last_request.url.path.endswith(BURT_ID)

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, service, mock_backend):
        mock_backend.reply(status_code=401, json_body={"detail": "invalid api key"})

        with pytest.raises(AudioSynthesisError) as exc_info:
            await service.synthesize("hello")

        assert exc_info.value.status_code == 401
        assert exc_info.value.context["status_code"] == 401

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, service, mock_backend):
        mock_backend.fail_with(httpx.ConnectError)

        with pytest.raises(AudioSynthesisError):
            await service.synthesize("hello")

    @pytest.mark.asyncio
    async def test_blank_text_rejected_without_request(self, service, mock_backend):
        with pytest.raises(ValidationError):
            await service.synthesize("   ")
        assert mock_backend.requests == []
