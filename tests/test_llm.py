"""Tests for provider request shaping, response extraction, streaming and cancellation."""

import json
import queue
from unittest.mock import MagicMock, patch

import pytest
import requests

from qai.chat import stream_reply
from qai.llm import (
    AnthropicClient,
    CancelToken,
    End,
    LLMError,
    OllamaClient,
    OpenAICompatibleClient,
    Token,
    create_chat_completion_client,
    decode_stream_line,
    list_ollama_models,
)


HISTORY = [("user", "hi"), ("assistant", "hello"), ("user", "again")]


def fake_response(body=None, *, lines=(), status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = body
    response.text = json.dumps(body) if body is not None else ""
    response.iter_lines.return_value = iter(lines)
    return response


def sse(payload):
    return f"data: {json.dumps(payload)}".encode()


# =========================================================================
# Provider factory
# =========================================================================


class TestFactory:
    def test_dialect_per_provider(self):
        assert isinstance(create_chat_completion_client("anthropic", api_key="k"), AnthropicClient)
        assert isinstance(create_chat_completion_client("ollama"), OllamaClient)
        for name in ("openai", "xai", "zen", "custom"):
            client = create_chat_completion_client(name, api_key="k", base_url="http://x")
            assert type(client) is OpenAICompatibleClient

    def test_default_model_and_url(self):
        client = create_chat_completion_client("ollama")
        assert client.model == "gemma3"
        assert client.url == "http://localhost:11434/api/chat"

    def test_custom_url_used(self):
        client = create_chat_completion_client("custom", "m", api_key="k", base_url=" http://my/v1/chat ")
        assert client.url == "http://my/v1/chat"

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        assert create_chat_completion_client("openai").api_key == "env-key"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            create_chat_completion_client("nope")


# =========================================================================
# Request shaping
# =========================================================================


class TestRequests:
    def test_anthropic_request(self):
        client = create_chat_completion_client("anthropic", "claude", api_key="secret")
        body = {"content": [{"type": "text", "text": "answer"}], "stop_reason": "end_turn"}
        with patch("qai.llm.base.requests.post", return_value=fake_response(body)) as post:
            assert client.call("SYS", HISTORY) == "answer"
        kwargs = post.call_args.kwargs
        assert post.call_args.args[0] == "https://api.anthropic.com/v1/messages"
        assert kwargs["headers"]["x-api-key"] == "secret"
        assert kwargs["headers"]["anthropic-version"] == "2023-06-01"
        assert kwargs["json"]["system"] == "SYS"
        assert kwargs["json"]["messages"][0] == {"role": "user", "content": "hi"}
        assert kwargs["json"]["stream"] is False
        assert kwargs["json"]["max_tokens"] == 2048

    def test_openai_request(self):
        client = create_chat_completion_client("openai", "gpt", api_key="secret")
        body = {"choices": [{"message": {"content": "answer"}, "finish_reason": "stop"}]}
        with patch("qai.llm.base.requests.post", return_value=fake_response(body)) as post:
            response = client.chat("SYS", HISTORY)
        assert response.content == "answer"
        assert response.finish_reason == "stop"
        kwargs = post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["json"]["messages"][0] == {"role": "system", "content": "SYS"}
        assert kwargs["json"]["messages"][1:] == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "again"},
        ]
        assert "system" not in kwargs["json"]

    def test_ollama_request_has_no_auth(self):
        client = create_chat_completion_client("ollama", "llama3")
        body = {"message": {"role": "assistant", "content": "local"}, "done": True}
        with patch("qai.llm.base.requests.post", return_value=fake_response(body)) as post:
            assert client.call("SYS", HISTORY) == "local"
        assert "Authorization" not in post.call_args.kwargs["headers"]
        assert post.call_args.kwargs["json"]["messages"][0]["role"] == "system"

    def test_http_error(self):
        client = create_chat_completion_client("openai", api_key="k")
        with patch("qai.llm.base.requests.post", return_value=fake_response({"error": "bad"}, status=401)):
            with pytest.raises(LLMError, match="401"):
                client.call("SYS", HISTORY)

    def test_transport_error(self):
        client = create_chat_completion_client("openai", api_key="k")
        with patch("qai.llm.base.requests.post", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(LLMError, match="refused"):
                client.call("SYS", HISTORY)

    def test_malformed_body(self):
        client = create_chat_completion_client("openai", api_key="k")
        with patch("qai.llm.base.requests.post", return_value=fake_response({"unexpected": True})):
            with pytest.raises(LLMError, match="Malformed"):
                client.call("SYS", HISTORY)

    def test_missing_token(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        client = create_chat_completion_client("openai")
        with patch("qai.llm.base.requests.post") as post:
            with pytest.raises(LLMError, match="API token is empty"):
                client.call("SYS", HISTORY)
        post.assert_not_called()

    def test_missing_custom_url(self):
        client = create_chat_completion_client("custom", api_key="k")
        with pytest.raises(LLMError, match="Custom endpoint URL is empty"):
            client.call("SYS", HISTORY)


# =========================================================================
# Stream line decoding
# =========================================================================


class TestDecodeStreamLine:
    def test_anthropic_delta(self):
        line = sse({"type": "content_block_delta", "delta": {"type": "text_delta", "text": "Hel"}})
        assert decode_stream_line(line) == [Token("Hel")]

    def test_openai_delta(self):
        assert decode_stream_line(sse({"choices": [{"delta": {"content": "lo"}}]})) == [Token("lo")]

    def test_ollama_ndjson(self):
        line = json.dumps({"message": {"role": "assistant", "content": "x"}, "done": False})
        assert decode_stream_line(line) == [Token("x")]

    def test_ollama_done(self):
        line = json.dumps({"message": {"role": "assistant", "content": ""}, "done": True})
        assert decode_stream_line(line) == [End()]

    def test_done_sentinel(self):
        assert decode_stream_line(b"data: [DONE]") == [End()]

    @pytest.mark.parametrize("line", [b"", b"event: message_start", b"data: {not json", b": keep-alive", b"[1, 2]"])
    def test_ignored_lines(self, line):
        assert decode_stream_line(line) == []

    def test_empty_openai_delta_dropped(self):
        assert decode_stream_line(sse({"choices": [{"delta": {"role": "assistant", "content": ""}}]})) == []


# =========================================================================
# Streaming
# =========================================================================


class TestStream:
    def test_anthropic_stream(self):
        client = AnthropicClient("m", url="http://a", api_key="k")
        lines = [
            b"event: content_block_delta",
            sse({"delta": {"text": "Hello"}}),
            b"",
            sse({"delta": {"text": " world"}}),
            b"data: [DONE]",
            sse({"delta": {"text": "ignored"}}),
        ]
        response = fake_response(lines=lines)
        with patch("qai.llm.base.requests.post", return_value=response) as post:
            events = list(client.stream("SYS", HISTORY))
        assert events == [Token("Hello"), Token(" world"), End()]
        assert post.call_args.kwargs["stream"] is True
        assert post.call_args.kwargs["json"]["stream"] is True
        response.close.assert_called()

    def test_bad_line_does_not_abort(self):
        client = OpenAICompatibleClient("m", url="http://o", api_key="k")
        lines = [sse({"choices": [{"delta": {"content": "a"}}]}), b"data: garbage", sse({"choices": [{"delta": {"content": "b"}}]})]
        with patch("qai.llm.base.requests.post", return_value=fake_response(lines=lines)):
            assert list(client.stream("SYS", HISTORY)) == [Token("a"), Token("b"), End()]

    def test_ollama_stream_stops_on_done(self):
        client = OllamaClient("m", url="http://l")
        lines = [
            json.dumps({"message": {"content": "one"}, "done": False}).encode(),
            json.dumps({"message": {"content": "two"}, "done": True}).encode(),
            json.dumps({"message": {"content": "three"}, "done": False}).encode(),
        ]
        with patch("qai.llm.base.requests.post", return_value=fake_response(lines=lines)):
            assert list(client.stream("SYS", HISTORY)) == [Token("one"), Token("two"), End()]

    def test_stream_without_terminator_still_ends(self):
        client = OpenAICompatibleClient("m", url="http://o", api_key="k")
        with patch("qai.llm.base.requests.post", return_value=fake_response(lines=[sse({"choices": [{"delta": {"content": "a"}}]})])):
            assert list(client.stream("SYS", HISTORY)) == [Token("a"), End()]

    def test_cancel_mid_stream_keeps_delivered_tokens(self):
        client = OpenAICompatibleClient("m", url="http://o", api_key="k")
        lines = [sse({"choices": [{"delta": {"content": c}}]}) for c in "abc"]
        response = fake_response(lines=lines)
        cancel = CancelToken()
        events = []
        with patch("qai.llm.base.requests.post", return_value=response):
            for event in client.stream("SYS", HISTORY, cancel):
                events.append(event)
                if event == Token("a"):
                    cancel.cancel()
        assert events == [Token("a"), End()]
        response.close.assert_called()

    def test_cancel_before_start_sends_nothing(self):
        client = OpenAICompatibleClient("m", url="http://o", api_key="k")
        cancel = CancelToken()
        cancel.cancel()
        with patch("qai.llm.base.requests.post") as post:
            assert list(client.stream("SYS", HISTORY, cancel)) == [End()]
        post.assert_not_called()

    def test_read_error_after_cancel_is_quiet(self):
        client = OpenAICompatibleClient("m", url="http://o", api_key="k")
        cancel = CancelToken()

        def lines():
            yield sse({"choices": [{"delta": {"content": "a"}}]})
            cancel.cancel()
            raise requests.ConnectionError("connection closed")

        response = fake_response()
        response.iter_lines.return_value = lines()
        with patch("qai.llm.base.requests.post", return_value=response):
            assert list(client.stream("SYS", HISTORY, cancel)) == [Token("a"), End()]

    def test_read_error_without_cancel_raises(self):
        client = OpenAICompatibleClient("m", url="http://o", api_key="k")

        def lines():
            yield sse({"choices": [{"delta": {"content": "a"}}]})
            raise requests.ConnectionError("reset")

        response = fake_response()
        response.iter_lines.return_value = lines()
        with patch("qai.llm.base.requests.post", return_value=response):
            stream = client.stream("SYS", HISTORY)
            assert next(stream) == Token("a")
            with pytest.raises(LLMError, match="reset"):
                next(stream)

    def test_cancel_closes_bound_response(self):
        cancel = CancelToken()
        response = MagicMock()
        cancel.bind(response)
        cancel.cancel()
        response.close.assert_called_once()
        assert cancel.cancelled


# =========================================================================
# Direct chat mode
# =========================================================================


class FakeStreamClient:
    def __init__(self, events=(), error=None):
        self.events = list(events)
        self.error = error

    def stream(self, system, history, cancel=None):
        yield from self.events
        if self.error is not None:
            raise self.error


class TestStreamReply:
    def test_tokens_then_terminator(self):
        channel = queue.Queue()
        text = stream_reply(FakeStreamClient([Token("a"), Token("b"), End()]), "SYS", HISTORY, channel)
        assert text == "ab"
        assert [channel.get_nowait() for _ in range(3)] == ["a", "b", None]
        assert channel.empty()

    def test_error_is_inline(self):
        channel = queue.Queue()
        stream_reply(FakeStreamClient([Token("a")], error=LLMError("boom")), "SYS", HISTORY, channel)
        assert [channel.get_nowait() for _ in range(3)] == ["a", "[error: boom]", None]
        assert channel.empty()

    def test_full_channel_drops_tokens_but_still_terminates(self):
        channel = MagicMock()
        channel.put_nowait.side_effect = queue.Full
        text = stream_reply(FakeStreamClient([Token("a"), Token("b"), End()]), "SYS", HISTORY, channel)
        assert text == "ab"
        channel.put.assert_called_once_with(None)


# =========================================================================
# Ollama model listing
# =========================================================================


class TestListOllamaModels:
    def test_names(self):
        body = {"models": [{"name": "gemma3:latest"}, {"name": "llama3"}]}
        with patch("qai.llm.ollama.requests.get", return_value=fake_response(body)) as get:
            assert list_ollama_models() == ["gemma3:latest", "llama3"]
        assert get.call_args.args[0] == "http://localhost:11434/api/tags"

    def test_unreachable(self):
        with patch("qai.llm.ollama.requests.get", side_effect=requests.ConnectionError("down")):
            assert list_ollama_models() == []
