from typing import List, Optional

import openai
import orjson
from injector import inject
from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.entities import NO_MOVIES_FOUND_CONTENT, NO_MOVIES_FOUND_TITLE, Recommendation
from domain.exceptions import MalformedModelOutputError, RecommendationError
from domain.interfaces import ILLMService

MAX_DESCRIPTION_WORDS = 60
NO_CONTEXT_PLACEHOLDER = "No matching context found."

SYSTEM_PROMPT = "\n".join(
    [
        "You are a precise movie recommender.",
        "Given a user input, a context summary and optionally a maximum movie duration (in minutes), "
        "recommend exactly one movie that is similar to the input and consistent with the context.",
        'Respond ONLY as minified JSON with this shape: {{"title":"Movie Title","content":"Movie Description","releaseYear":"Release Year"}}.',
        "Rules:",
        "- Only recommend if confident it matches both input and context.",
        f'- If unsure or no good match, respond exactly with: {{{{"title":"{NO_MOVIES_FOUND_TITLE}","content":"{NO_MOVIES_FOUND_CONTENT}"}}}}',
        "- Do not include extra fields, commentary, markdown, or quotes outside the JSON.",
        f"- Keep the description concise (<= {MAX_DESCRIPTION_WORDS} words).",
    ]
)

USER_PROMPT = """User input:
{input}

Context:
{context}
{duration_instruction}
Return only the JSON object as specified."""


class ModelRecommendation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    release_year: Optional[int] = Field(default=None, alias="releaseYear")


class OpenAILLMService(ILLMService):
    @inject
    def __init__(self, settings: Settings, logger: BoundLogger):
        self.model = settings.chat_model
        self.llm = ChatOpenAI(
            api_key=settings.openai_api_key,
            model=self.model,
            temperature=settings.temperature,
            presence_penalty=settings.presence_penalty,
            frequency_penalty=settings.frequency_penalty,
            timeout=settings.request_timeout_seconds,
            max_retries=0,
        )
        self.prompt = ChatPromptTemplate.from_messages([("system", SYSTEM_PROMPT), ("human", USER_PROMPT)])
        self.logger = logger

    def build_messages(
        self, input_text: str, context: str, duration_minutes: Optional[int] = None
    ) -> List[BaseMessage]:
        duration_instruction = ""
        if duration_minutes is not None:
            duration_instruction = (
                f"\nMax movie duration:\nThe recommended movie's runtime must not exceed {duration_minutes} minutes.\n"
            )
        return self.prompt.format_messages(
            input=input_text,
            context=context or NO_CONTEXT_PLACEHOLDER,
            duration_instruction=duration_instruction,
        )

    async def recommend(
        self, input_text: str, context: str, duration_minutes: Optional[int] = None
    ) -> Recommendation:
        messages = self.build_messages(input_text, context, duration_minutes)
        self.logger.info(
            "Requesting recommendation from LLM",
            model=self.model,
            input_length=len(input_text),
            context_length=len(context or ""),
            duration_minutes=duration_minutes,
        )
        try:
            response = await self.llm.ainvoke(messages)
        except openai.OpenAIError as e:
            self.logger.error("LLM request failed", model=self.model, error=str(e))
            raise RecommendationError(f"Chat completion failed: {e}") from e

        recommendation = self.parse_response(response.content)
        self.logger.info(
            "LLM recommendation parsed",
            title=recommendation.title,
            release_year=recommendation.release_year,
            sentinel=recommendation.is_sentinel,
        )
        return recommendation

    def parse_response(self, raw) -> Recommendation:
        if not isinstance(raw, str):
            raise MalformedModelOutputError("Model reply is not a text body", raw_output=str(raw))
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise MalformedModelOutputError(f"Model reply is not valid JSON: {e}", raw_output=raw) from e
        if not isinstance(payload, dict):
            raise MalformedModelOutputError("Model reply is not a JSON object", raw_output=raw)

        if payload.get("title") == NO_MOVIES_FOUND_TITLE:
            return Recommendation.no_movies_found()

        try:
            parsed = ModelRecommendation.model_validate(payload)
        except ValidationError as e:
            raise MalformedModelOutputError(f"Model reply has the wrong shape: {e}", raw_output=raw) from e
        if parsed.release_year is None or not 1000 <= parsed.release_year <= 9999:
            raise MalformedModelOutputError("Model reply has no four-digit releaseYear", raw_output=raw)

        words = len(parsed.content.split())
        if words > MAX_DESCRIPTION_WORDS:
            self.logger.warning("LLM description exceeds word limit", title=parsed.title, words=words)

        return Recommendation(title=parsed.title, content=parsed.content, release_year=parsed.release_year)
