"""Provider orchestration for chat, image chat, recipe recommendations and meal estimates.

Providers are tried one at a time in a fixed priority order and the first
usable answer wins, so a working first provider means the others are never
paid for. Rate-limit failures put the capability on a short cooldown; every
other failure just moves on to the next provider. When nothing remote
answers, a deterministic local generator (chat) or the cart-scored static
table (recipes) takes over.
"""
import asyncio
import logging
import random
from pathlib import PurePath
from typing import Any, Dict, Iterable, List, Optional, Set

from healthylife.domain.Conversation import ConversationMemory
from healthylife.domain.Cooldown import CooldownState, TEXT, VISION
from healthylife.domain.Meal import MealEstimate
from healthylife.domain.RecipeSuggestion import RecommendationResult
from healthylife.domain.Reply import ChatMessage, NormalizedReply
from healthylife.events.event_helpers import publish_fallback, publish_provider_failed, publish_rate_limited
from healthylife.infra.providers.base import Provider
from healthylife.logic.coach.errors import InvalidInput, ParseFailure, ProviderError, ProviderUnavailable, RateLimited, classify_error
from healthylife.logic.coach.local_reply import build_local_reply, preference_label
from healthylife.logic.coach.parsing import parse_json_object, parse_recipes
from healthylife.logic.grocery.static_plan import normalize_diet, scored_fallback
from healthylife.logic.meals.food_check import looks_like_food
from healthylife.utilities.config import COOLDOWN_SECONDS, PROVIDER_TIMEOUT_SECONDS, STRICT_FOOD_VALIDATION
from healthylife.utilities.constants import (
    FOOD_CHECK_PROMPT,
    MEAL_ESTIMATE_PROMPT,
    MEAL_INPUT_REQUIRED_MESSAGE,
    MOCK_CALORIE_RANGE,
    NO_ESTIMATE_MESSAGE,
    NOT_FOOD_MESSAGE,
    RETRY_RECIPE_PROMPT,
    RULES_RECIPE_PROMPT,
    STRICT_RECIPE_PROMPT,
    SUMMARY_CONTEXT_TEMPLATE,
    SUMMARY_PROMPT,
    SYSTEM_PROMPT_TEMPLATE,
    VISION_COOLED_REPLY,
    VISION_EMPTY_REPLY,
    VISION_PROMPT,
    VISION_RATE_LIMITED_REPLY,
)

logger = logging.getLogger(__name__)

RECIPES = "recipes"
MEALS = "meals"
SUMMARY_HISTORY = 4


def _cart_line(cart: Iterable[Dict[str, Any]], with_quantity: bool = True) -> str:
    parts = []
    for c in cart:
        name = c.get("name", "")
        parts.append(f"{name} (x{c.get('quantity') or 1})" if with_quantity else str(name))
    return ", ".join(parts)


class RecipeStage:
    """One provider in the recommendation chain.

    ``retry_prompt`` enables a single stricter retry after a parse failure; a
    stage with a retry accepts an empty recipe list, one without falls through.
    ``source`` is the label reported in ``meta.source`` (the provider name by
    default; the Gemini stage reports ``google``).
    """

    def __init__(self, provider: Provider, prompt: str, retry_prompt: Optional[str] = None,
                 temperature: float = 0.6, max_tokens: int = 800, source: Optional[str] = None):
        self.provider = provider
        self.prompt = prompt
        self.retry_prompt = retry_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.source = source or provider.name

    def __repr__(self) -> str:
        return f"<RecipeStage {self.source} retry={self.retry_prompt is not None}>"


class CoachOrchestrator:
    def __init__(self, chat_providers: Optional[List[Provider]] = None,
                 recipe_stages: Optional[List[RecipeStage]] = None,
                 vision_provider: Optional[Provider] = None, *,
                 cooldown: Optional[CooldownState] = None,
                 memory: Optional[ConversationMemory] = None,
                 cooldown_seconds: float = COOLDOWN_SECONDS,
                 timeout: float = PROVIDER_TIMEOUT_SECONDS,
                 meal_vision_providers: Optional[List[Provider]] = None,
                 nutrition_estimator=None,
                 strict_food_validation: bool = STRICT_FOOD_VALIDATION,
                 rng: Optional[random.Random] = None):
        self.chat_providers = list(chat_providers or [])
        self.recipe_stages = list(recipe_stages or [])
        self.vision_provider = vision_provider
        self.cooldown = cooldown or CooldownState()
        self.memory = memory or ConversationMemory()
        self.cooldown_seconds = cooldown_seconds
        self.timeout = timeout
        self.meal_vision_providers = list(meal_vision_providers or [])
        # Anything with ``async estimate(query) -> MealEstimate`` (Nutritionix).
        self.nutrition_estimator = nutrition_estimator
        self.strict_food_validation = strict_food_validation
        self.rng = rng or random.Random()
        self._summary_tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_providers(cls, perplexity: Optional[Provider] = None, gemini: Optional[Provider] = None,
                       openai: Optional[Provider] = None, nutritionix=None, **kwargs) -> "CoachOrchestrator":
        """Wire the standard priority order: Perplexity, Gemini, OpenAI."""
        chat = [p for p in (perplexity, gemini, openai) if p is not None]
        stages = []
        if perplexity is not None:
            stages.append(RecipeStage(perplexity, STRICT_RECIPE_PROMPT, max_tokens=800))
        if gemini is not None:
            stages.append(RecipeStage(gemini, RULES_RECIPE_PROMPT, RETRY_RECIPE_PROMPT, max_tokens=600,
                                      source="google"))
        kwargs.setdefault("meal_vision_providers", [p for p in (gemini, openai) if p is not None])
        kwargs.setdefault("nutrition_estimator", nutritionix)
        return cls(chat, stages, gemini, **kwargs)

    def describe(self) -> Dict[str, Any]:
        return {
            "chat": [p.name for p in self.chat_providers],
            "recipes": [s.source for s in self.recipe_stages],
            "vision": self.vision_provider.name if self.vision_provider else None,
            "meals": {
                "vision": [p.name for p in self.meal_vision_providers],
                "text": self.nutrition_estimator.name if self.nutrition_estimator else "mock",
                "strictFoodValidation": self.strict_food_validation,
            },
            "cooldown": self.cooldown.to_dict(),
        }

    # -------------------- Shared helpers --------------------
    async def _attempt(self, call):
        return await asyncio.wait_for(call, timeout=self.timeout)

    def _note_failure(self, exc: BaseException, provider: str, capability: str) -> ProviderError:
        """Classify a failed call; rate limits on text/vision start a cooldown."""
        err = classify_error(exc, provider)
        if isinstance(err, RateLimited):
            cooldown = 0.0
            if capability in (TEXT, VISION):
                self.cooldown.trip(capability, self.cooldown_seconds)
                cooldown = self.cooldown_seconds
            logger.warning("%s rate limited (%s), cooldown %.0fs: %s", provider, capability, cooldown, err)
            publish_rate_limited(provider, capability, cooldown)
        else:
            logger.warning("%s failed (%s): %s", provider, capability, err)
            publish_provider_failed(provider, capability, str(err))
        return err

    def system_prompt(self, diet: str, summary: Optional[str] = None) -> str:
        prompt = SYSTEM_PROMPT_TEMPLATE.format(diet=diet, pref_label=preference_label(diet))
        if summary:
            prompt += "\n\n" + SUMMARY_CONTEXT_TEMPLATE.format(summary=summary)
        return prompt

    # -------------------- Chat --------------------
    async def chat(self, messages: List[ChatMessage], diet_preference: str = "veg",
                   conversation_key: str = "anon") -> NormalizedReply:
        diet = normalize_diet(diet_preference)

        if not self.chat_providers:
            publish_fallback(TEXT, "mock", "no provider configured")
            return NormalizedReply(build_local_reply(messages, diet), "mock")

        if self.cooldown.is_cooling(TEXT):
            publish_fallback(TEXT, "local-fallback", "cooldown")
            return NormalizedReply(build_local_reply(messages, diet), "local-fallback", cooled=True)

        system = self.system_prompt(diet, self.memory.get(conversation_key))
        rate_limited = False
        for provider in self.chat_providers:
            try:
                content = await self._attempt(provider.chat(system, messages))
                if not content:
                    raise ProviderUnavailable("empty reply", provider.name)
            except Exception as exc:
                err = self._note_failure(exc, provider.name, TEXT)
                rate_limited = rate_limited or isinstance(err, RateLimited)
                continue

            summarized = False
            if provider.summarizes:
                self._schedule_summary(provider, messages, content, conversation_key)
                summarized = True
            return NormalizedReply(content, provider.name, summarized=summarized)

        publish_fallback(TEXT, "local-fallback", "all providers failed")
        return NormalizedReply(build_local_reply(messages, diet), "local-fallback", rate_limited=rate_limited)

    def _schedule_summary(self, provider: Provider, messages: List[ChatMessage], reply: str, key: str) -> None:
        history = list(messages[-SUMMARY_HISTORY:]) + [ChatMessage("assistant", reply)]
        task = asyncio.get_running_loop().create_task(self._summarize(provider, history, key))
        self._summary_tasks.add(task)
        task.add_done_callback(self._summary_tasks.discard)

    async def _summarize(self, provider: Provider, history: List[ChatMessage], key: str) -> None:
        try:
            summary = await self._attempt(provider.chat(SUMMARY_PROMPT, history, temperature=0.2, max_tokens=120))
        except Exception as exc:
            # Context only: the reply has already been returned.
            logger.info("conversation summary via %s failed: %s", provider.name, exc)
            return
        self.memory.remember(key, summary)

    async def flush_summaries(self) -> None:
        """Wait for pending background summaries (used on shutdown and in tests)."""
        if self._summary_tasks:
            await asyncio.gather(*list(self._summary_tasks), return_exceptions=True)

    # -------------------- Vision --------------------
    async def describe_image(self, image_bytes: bytes, mimetype: str) -> NormalizedReply:
        """Describe a food photo with the single vision provider.

        Unlike chat, a non-rate-limit provider error is raised to the caller.
        """
        if not (mimetype or "").startswith("image/"):
            raise InvalidInput("Only image files are supported")
        if not image_bytes:
            raise InvalidInput("image is required")
        provider = self.vision_provider
        if provider is None:
            raise InvalidInput("Google API key not configured")

        if self.cooldown.is_cooling(VISION):
            publish_fallback(VISION, "local-fallback", "cooldown")
            return NormalizedReply(VISION_COOLED_REPLY, "local-fallback", vision=True, cooled=True)

        try:
            content = await self._attempt(provider.describe_image(VISION_PROMPT, image_bytes, mimetype))
        except Exception as exc:
            err = self._note_failure(exc, provider.name, VISION)
            if isinstance(err, RateLimited):
                return NormalizedReply(VISION_RATE_LIMITED_REPLY, "local-fallback", vision=True, rate_limited=True)
            if err is exc:
                raise
            raise err from exc
        return NormalizedReply(content or VISION_EMPTY_REPLY, provider.name, vision=True)

    # -------------------- Recommendations --------------------
    async def recommend(self, diet: str, cart: Optional[List[Dict[str, Any]]] = None) -> RecommendationResult:
        """Recipe ideas for the cart. Never raises."""
        diet = normalize_diet(diet)
        cart = [c for c in (cart or []) if isinstance(c, dict)]
        try:
            for stage in self.recipe_stages:
                result = await self._run_stage(stage, diet, cart)
                if result is not None:
                    return result
            publish_fallback(RECIPES, "static", "no provider answered")
            return RecommendationResult(diet, scored_fallback(diet, cart), "static")
        except Exception as exc:
            logger.exception("reco error-fallback")
            return RecommendationResult(diet, scored_fallback(diet, cart), "error-fallback", message=str(exc))

    async def _run_stage(self, stage: RecipeStage, diet: str, cart: List[Dict[str, Any]]) -> Optional[RecommendationResult]:
        """Result of one stage, or None to move on to the next one."""
        provider = stage.provider
        model = provider.complete_model or provider.model
        try:
            prompt = stage.prompt.format(diet=diet, cart=_cart_line(cart))
            try:
                raw = await self._attempt(
                    provider.complete(prompt, temperature=stage.temperature, max_tokens=stage.max_tokens))
                recipes = parse_recipes(raw, provider.name)
                if not recipes and stage.retry_prompt is None:
                    raise ParseFailure("empty recipe list", provider.name)
            except ParseFailure:
                if stage.retry_prompt is None:
                    raise
                retry = stage.retry_prompt.format(diet=diet, cart=_cart_line(cart, with_quantity=False))
                raw = await self._attempt(provider.complete(retry, temperature=0.2, max_tokens=400))
                try:
                    recipes = parse_recipes(raw, provider.name)
                except ParseFailure:
                    logger.warning("reco parse-failed source=%s model=%s", stage.source, model)
                    publish_fallback(RECIPES, f"{stage.source}-parse-failed", "unparsable after retry")
                    return RecommendationResult(diet, [], f"{stage.source}-parse-failed", model=model)
        except Exception as exc:
            self._note_failure(exc, provider.name, RECIPES)
            return None

        logger.info("reco source=%s cart=%d recipes=%d", stage.source, len(cart), len(recipes))
        return RecommendationResult(diet, recipes, stage.source, model=model)

    # -------------------- Meal estimates --------------------
    async def is_food_image(self, image_bytes: bytes, mimetype: str) -> bool:
        """Ask each vision provider whether the photo shows food; any yes wins.

        With no provider able to answer, the photo is accepted unless strict
        food validation is on.
        """
        if not (mimetype or "").startswith("image/"):
            return False
        for provider in self.meal_vision_providers:
            try:
                raw = await self._attempt(provider.describe_image(FOOD_CHECK_PROMPT, image_bytes, mimetype))
                verdict = parse_json_object(raw, provider.name)
            except Exception as exc:
                self._note_failure(exc, provider.name, MEALS)
                continue
            if looks_like_food(verdict, provider.name):
                return True
            logger.info("%s says not food: %s", provider.name, verdict.get("label"))
        return not self.strict_food_validation

    async def estimate_meal(self, image_bytes: Optional[bytes], mimetype: Optional[str] = None,
                            description: Optional[str] = None, filename: Optional[str] = None) -> MealEstimate:
        """Calories and macros for a meal photo and/or a free-text description.

        Vision providers are tried in order (Gemini, then OpenAI); when none
        gives a usable estimate the description (or the file name) goes to the
        nutrition estimator, or to a random mock figure when there is none.
        Raises InvalidInput for a missing input, a non-food photo or an
        estimate without calories.
        """
        description = (description or "").strip()
        if not image_bytes and not description:
            raise InvalidInput(MEAL_INPUT_REQUIRED_MESSAGE)

        estimate = None
        if image_bytes:
            if not await self.is_food_image(image_bytes, mimetype or ""):
                raise InvalidInput(NOT_FOOD_MESSAGE)
            estimate = await self._estimate_from_photo(image_bytes, mimetype or "")

        if estimate is None:
            query = description or (PurePath(filename).stem if filename else "") or "meal"
            estimate = await self._estimate_from_text(query)

        if not estimate.plausible:
            raise InvalidInput(NO_ESTIMATE_MESSAGE)
        logger.info("meal estimate %s", estimate)
        return estimate

    async def _estimate_from_photo(self, image_bytes: bytes, mimetype: str) -> Optional[MealEstimate]:
        for provider in self.meal_vision_providers:
            try:
                raw = await self._attempt(provider.describe_image(MEAL_ESTIMATE_PROMPT, image_bytes, mimetype))
                estimate = MealEstimate.from_provider(parse_json_object(raw, provider.name), provider.name)
                if not estimate.plausible:
                    raise ParseFailure("estimate has no calories", provider.name)
            except Exception as exc:
                self._note_failure(exc, provider.name, MEALS)
                continue
            return estimate
        return None

    async def _estimate_from_text(self, query: str) -> MealEstimate:
        estimator = self.nutrition_estimator
        if estimator is None:
            low, high = MOCK_CALORIE_RANGE
            publish_fallback(MEALS, "mock", "no nutrition estimator configured")
            return MealEstimate(query, float(self.rng.randrange(low, high)), "mock")
        try:
            return await self._attempt(estimator.estimate(query))
        except Exception as exc:
            err = self._note_failure(exc, estimator.name, MEALS)
            if err is exc:
                raise
            raise err from exc


__all__ = ['CoachOrchestrator', 'RecipeStage', 'RECIPES', 'MEALS']
