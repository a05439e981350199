"""Tests for embed_tasks.embeddings module."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai

from embed_tasks.embeddings import OpenAIEmbeddingProvider, _coerce_vector


def _response(vector):
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


class TestCoerceVector:
    def test_valid_list(self) -> None:
        assert _coerce_vector([1, 2.5]) == [1.0, 2.5]

    def test_empty_returns_none(self) -> None:
        assert _coerce_vector([]) is None

    def test_not_a_list_returns_none(self) -> None:
        assert _coerce_vector("1,2") is None
        assert _coerce_vector(None) is None

    def test_non_numeric_returns_none(self) -> None:
        assert _coerce_vector([1.0, "x"]) is None
        assert _coerce_vector([True, 1.0]) is None

    def test_non_finite_returns_none(self) -> None:
        assert _coerce_vector([1.0, float("nan")]) is None


class TestOpenAIEmbeddingProvider:
    def test_no_api_key_is_unavailable(self, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        provider = OpenAIEmbeddingProvider()
        assert not provider.configured
        with patch("embed_tasks.embeddings.OpenAI") as mock_openai_cls:
            assert provider.embed("text") is None
        mock_openai_cls.assert_not_called()

    def test_reads_api_key_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert OpenAIEmbeddingProvider().configured

    @patch("embed_tasks.embeddings.OpenAI")
    def test_returns_vector(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _response([0.1, 0.2])
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(model="m", api_key="sk-test", timeout=5.0)
        assert provider.embed("hello") == [0.1, 0.2]

        mock_openai_cls.assert_called_once_with(api_key="sk-test", max_retries=0, timeout=5.0)
        mock_client.embeddings.create.assert_called_once_with(model="m", input="hello")

    @patch("embed_tasks.embeddings.OpenAI")
    def test_truncates_input(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _response([1.0])
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        provider.embed("x" * 9000)

        sent = mock_client.embeddings.create.call_args.kwargs["input"]
        assert len(sent) == 8000

    @patch("embed_tasks.embeddings.OpenAI")
    def test_connection_error_is_unavailable(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        mock_client.embeddings.create.side_effect = openai.APIConnectionError(request=request)
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        assert provider.embed("hello") is None
        assert mock_client.embeddings.create.call_count == 1

    @patch("embed_tasks.embeddings.OpenAI")
    def test_error_status_is_unavailable(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        response = httpx.Response(500, request=request)
        mock_client.embeddings.create.side_effect = openai.InternalServerError(
            "server error", response=response, body=None
        )
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        assert provider.embed("hello") is None

    @patch("embed_tasks.embeddings.OpenAI")
    def test_empty_data_is_unavailable(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = SimpleNamespace(data=[])
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        assert provider.embed("hello") is None

    @patch("embed_tasks.embeddings.OpenAI")
    def test_malformed_vector_is_unavailable(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _response(["a", "b"])
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        assert provider.embed("hello") is None

    @patch("embed_tasks.embeddings.OpenAI")
    def test_client_reused(self, mock_openai_cls) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _response([1.0])
        mock_openai_cls.return_value = mock_client

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        provider.embed("one")
        provider.embed("two")

        mock_openai_cls.assert_called_once()
