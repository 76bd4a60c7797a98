"""
Unit tests for the generation client and question generator.

The Groq API is replaced by an httpx.MockTransport.
"""

import json

import httpx
import pytest

from quizzer.core.difficulty import Difficulty
from quizzer.services.llm_client import LLMClient, LLMError
from quizzer.services.question_generator import (
    QuestionGenerator,
    build_prompt,
    fallback_questions,
    normalize_questions,
)


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler) -> LLMClient:
    return LLMClient(api_key="gsk_test_key_long_enough_123", transport=httpx.MockTransport(handler))


def reply_with(content):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=completion(content))

    return handler


def generated(count: int, **overrides) -> list[dict]:
    items = []
    for i in range(count):
        item = {
            "id": 99,
            "question": f"What is {i} + 1?",
            "options": [str(i + 1), str(i), str(i + 2), str(i + 3)],
            "correctAnswer": 0,
            "difficulty": "hard",
            "explanation": f"{i} + 1 = {i + 1}",
        }
        item.update(overrides)
        items.append(item)
    return items


class TestLLMClient:
    def test_posts_chat_completion(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion('{"ok": true}'))

        client = make_client(handler)

        assert client.chat_json("system", "prompt", temperature=0.5, max_tokens=10) == {"ok": True}
        assert seen["path"].endswith("/chat/completions")
        assert seen["auth"] == "Bearer gsk_test_key_long_enough_123"
        assert seen["body"]["model"] == "llama-3.1-8b-instant"
        assert seen["body"]["messages"][0] == {"role": "system", "content": "system"}
        assert seen["body"]["max_tokens"] == 10

    def test_strips_code_fences(self):
        client = make_client(reply_with('```json\n[1, 2]\n```'))

        assert client.chat_json("s", "p") == [1, 2]

    def test_http_error_raises(self):
        client = make_client(lambda request: httpx.Response(500, json={"error": "boom"}))

        with pytest.raises(LLMError, match="500"):
            client.chat_json("s", "p")

    def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(LLMError, match="timed out"):
            make_client(handler).chat_json("s", "p")

    def test_invalid_json_raises(self):
        with pytest.raises(LLMError, match="not valid JSON"):
            make_client(reply_with("Here are your questions!")).chat_json("s", "p")

    def test_empty_content_raises(self):
        with pytest.raises(LLMError, match="Empty"):
            make_client(reply_with("   ")).chat_json("s", "p")

    @pytest.mark.parametrize("content", [123, ["x"], {"a": 1}, None])
    def test_non_text_content_raises(self, content):
        with pytest.raises(LLMError, match="non-text"):
            make_client(reply_with(content)).chat_json("s", "p")

    def test_bad_envelope_raises(self):
        client = make_client(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(LLMError, match="envelope"):
            client.chat_json("s", "p")


class TestFallbackQuestions:
    def test_deterministic_batch(self):
        first = fallback_questions("5", "Math", Difficulty.EASY, 3)
        second = fallback_questions("5", "Math", Difficulty.EASY, 3)

        assert first == second
        assert [q.id for q in first] == [1, 2, 3]

    def test_shape(self):
        question = fallback_questions("7", "Science", Difficulty.HARD, 1)[0]

        assert question.question == "advanced Science question 1 for grade 7"
        assert question.options[0] == "Correct answer for Science"
        assert len(question.options) == 4
        assert question.correct_answer == 0
        assert question.difficulty == Difficulty.HARD


class TestNormalizeQuestions:
    def test_renumbers_ids(self):
        questions = normalize_questions(generated(3), Difficulty.HARD, 3)

        assert [q.id for q in questions] == [1, 2, 3]

    def test_accepts_wrapped_object(self):
        questions = normalize_questions({"questions": generated(2)}, Difficulty.EASY, 2)

        assert len(questions) == 2

    def test_truncates_long_batch(self):
        assert len(normalize_questions(generated(5), Difficulty.MEDIUM, 3)) == 3

    def test_short_batch_rejected(self):
        with pytest.raises(ValueError):
            normalize_questions(generated(2), Difficulty.MEDIUM, 3)

    def test_defaults_difficulty_and_explanation(self):
        items = generated(1)
        del items[0]["difficulty"]
        del items[0]["explanation"]

        question = normalize_questions(items, Difficulty.EASY, 1)[0]

        assert question.difficulty == Difficulty.EASY
        assert question.explanation == "No explanation provided"


class TestQuestionGenerator:
    def test_without_client_uses_fallback(self):
        questions = QuestionGenerator(None).generate("5", "Math", Difficulty.MEDIUM, 4)

        assert questions == fallback_questions("5", "Math", Difficulty.MEDIUM, 4)

    def test_valid_generation(self):
        client = make_client(reply_with(json.dumps(generated(3))))

        questions = QuestionGenerator(client).generate("5", "Math", Difficulty.HARD, 3)

        assert questions[0].question == "What is 0 + 1?"
        assert questions[2].explanation == "2 + 1 = 3"

    @pytest.mark.parametrize(
        "content",
        [
            json.dumps(generated(3, options=["a", "b", "c"])),
            json.dumps(generated(3, correctAnswer=4)),
            json.dumps(generated(3, question="")),
            json.dumps(generated(2)),
            json.dumps({"message": "no"}),
            "not json at all",
        ],
    )
    def test_malformed_output_falls_back(self, content):
        client = make_client(reply_with(content))

        questions = QuestionGenerator(client).generate("5", "Math", Difficulty.MEDIUM, 3)

        assert questions == fallback_questions("5", "Math", Difficulty.MEDIUM, 3)

    def test_transport_failure_falls_back(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        questions = QuestionGenerator(make_client(handler)).generate("5", "Math", Difficulty.EASY, 2)

        assert questions[0].options[0] == "Correct answer for Math"

    @pytest.mark.parametrize("content", [123, ["x"], {"a": 1}])
    def test_non_text_content_falls_back(self, content):
        questions = QuestionGenerator(make_client(reply_with(content))).generate("5", "Math", Difficulty.MEDIUM, 3)

        assert questions == fallback_questions("5", "Math", Difficulty.MEDIUM, 3)

    def test_prompt_mentions_request(self):
        prompt = build_prompt("8", "History", Difficulty.HARD, 4)

        assert "Generate 4 advanced level History questions for grade 8" in prompt
        assert '"difficulty": "hard"' in prompt
