# commandless/core/resolution/policy.py
"""Intent resolution policy: the engine's entry point.

Per utterance:

1. No active templates -> Converse ("no commands configured").
2. Walk the matcher chain (generative matcher when configured, then the
   heuristic matcher), each behind the ``Matcher`` interface:
   - generative: candidate at or above the accept threshold -> Execute;
     conversational reply -> Converse. Failure, degradation or a
     low-confidence candidate -> next matcher.
   - heuristic: best candidate strictly above its context-sensitive
     threshold -> Execute.
3. Otherwise Converse with a canned reply for the detected intent.

Every branch ends in a ResolutionDecision. Only template-store failures
on ``resolve_for_tenant`` propagate to the caller.
"""

import logging
import re
from dataclasses import dataclass

from commandless.config import Settings, settings
from commandless.core.context.store import ConversationContext, ConversationContextStore
from commandless.core.errors import MatcherUnavailable
from commandless.core.extraction.mentions import (
    IdShape,
    default_id_shape,
    mention_params,
    mention_target,
    strip_mentions,
)
from commandless.core.extraction.params import extract_parameters
from commandless.core.matching.base import MatchCandidate, MatchResult, Matcher
from commandless.core.matching.generation import TextGenerator
from commandless.core.matching.heuristic import HeuristicMatcher
from commandless.core.matching.llm import LLMMatcher
from commandless.core.resolution.confirmation import (
    PendingConfirmationStore,
    is_affirmative_response,
    is_negative_response,
)
from commandless.core.resolution.models import (
    Clarify,
    Converse,
    Execute,
    ResolutionDecision,
    Utterance,
)
from commandless.core.resolution.responses import (
    CANCELLED_REPLY,
    INTENT_CANCELLED,
    INTENT_MODEL,
    INTENT_NO_TEMPLATES,
    NO_TEMPLATES_REPLY,
    canned_reply,
    detect_conversational_intent,
)
from commandless.core.templates.models import CommandTemplate
from commandless.core.templates.rendering import PLACEHOLDER_RE, render_output
from commandless.core.templates.repository import TemplateStore
from commandless.utils.logging import resolution_scope

logger = logging.getLogger(__name__)

CLARIFY_LIST_LIMIT = 8
DIGITS_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class ResolutionThresholds:
    """Tunable decision thresholds.

    Attributes:
        accept: Minimum confidence to execute a model or confirmed candidate.
        clarify: Lower edge of the yes/no clarify band (strict resolver).
        heuristic: Heuristic acceptance threshold for terse input.
        heuristic_polite: Heuristic threshold when politeness markers are present.
    """

    accept: float = 0.6
    clarify: float = 0.4
    heuristic: float = 0.25
    heuristic_polite: float = 0.15

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "ResolutionThresholds":
        config = config or settings
        return cls(
            accept=config.accept_threshold,
            clarify=config.clarify_threshold,
            heuristic=config.heuristic_threshold,
            heuristic_polite=config.heuristic_polite_threshold,
        )


class IntentResolutionPolicy:
    """Orchestrates the matchers and turns candidates into decisions.

    Args:
        store: Template store used by resolve_for_tenant and for usage counts.
        generator: Text generator; enables the generative matcher when given.
        context_store: Conversation memory consulted for reply context.
        thresholds: Decision thresholds; defaults come from settings.
        id_shape: Bare user-id strategy; defaults to settings.user_id_pattern.
        amount_max: Clamp applied to ``{amount}``; defaults to settings.amount_max.
        model_timeout: Generative matcher timeout in seconds.
        confirmations: Pending yes/no questions for the strict resolver.
        primary: Matcher tried before the heuristic one; built from
            ``generator`` when omitted.

    Example:
        >>> policy = IntentResolutionPolicy()
        >>> decision = await policy.resolve(
        ...     Utterance("ban <@123> for spamming", Author("u1"), "c1"), [ban_template]
        ... )
        >>> decision.rendered_output
        '/ban 123 spamming'
    """

    def __init__(
        self,
        store: TemplateStore | None = None,
        generator: TextGenerator | None = None,
        context_store: ConversationContextStore | None = None,
        thresholds: ResolutionThresholds | None = None,
        id_shape: IdShape | None = None,
        amount_max: int | None = None,
        model_timeout: float | None = None,
        confirmations: PendingConfirmationStore | None = None,
        primary: Matcher | None = None,
    ) -> None:
        self.store = store
        self.context_store = context_store
        self.thresholds = thresholds or ResolutionThresholds.from_settings()
        self.id_shape = id_shape or default_id_shape()
        self.amount_max = settings.amount_max if amount_max is None else amount_max
        self.heuristic = HeuristicMatcher(
            threshold=self.thresholds.heuristic,
            polite_threshold=self.thresholds.heuristic_polite,
            id_shape=self.id_shape,
        )
        if primary is None and generator is not None:
            primary = LLMMatcher(generator, timeout=model_timeout)
        self.primary = primary
        self.matchers: list[Matcher] = [
            m for m in (primary, self.heuristic) if m is not None
        ]
        self.confirmations = confirmations or PendingConfirmationStore()

    async def resolve_for_tenant(self, tenant_id: str, utterance: Utterance) -> ResolutionDecision:
        """Load the tenant's active templates and resolve.

        Raises:
            TemplateStoreError: If the store fails or times out.
            RuntimeError: If the policy has no template store.
        """
        if self.store is None:
            raise RuntimeError("No template store configured")
        with resolution_scope():
            templates = await self.store.list_active_templates(tenant_id)
            return await self.resolve(utterance, templates)

    async def resolve(
        self,
        utterance: Utterance,
        templates: list[CommandTemplate],
        context: ConversationContext | None = None,
    ) -> ResolutionDecision:
        """Resolve one utterance against a template set.

        Args:
            utterance: The incoming message.
            templates: Candidate templates; inactive ones are ignored.
            context: Conversation context; built from the context store when omitted.

        Returns:
            Execute, Clarify or Converse. Never raises for ordinary outcomes.
        """
        with resolution_scope():
            return await self._resolve(utterance, templates, context)

    async def _resolve(
        self,
        utterance: Utterance,
        templates: list[CommandTemplate],
        context: ConversationContext | None,
    ) -> ResolutionDecision:
        active = [t for t in templates if t.is_active]
        context = self._prepare_context(utterance, context)

        if not active:
            return self._converse(utterance, NO_TEMPLATES_REPLY, INTENT_NO_TEMPLATES)

        for matcher in self.matchers:
            result = await self._run_matcher(matcher, utterance, active, context)
            if result is None:
                continue
            best = result.best
            if best is not None and self._accepts(matcher, best, utterance.content):
                return await self._execute(best, utterance, matcher=matcher.name)
            if result.is_conversational:
                return self._converse(utterance, result.conversational_response, INTENT_MODEL)
            if best is not None:
                logger.info(
                    "Best %s confidence %.3f not accepted; trying next matcher",
                    matcher.name,
                    best.confidence,
                )

        intent = detect_conversational_intent(utterance.content)
        return self._converse(utterance, canned_reply(intent, active), intent)

    async def resolve_with_confirmation(
        self,
        utterance: Utterance,
        templates: list[CommandTemplate],
        context: ConversationContext | None = None,
    ) -> ResolutionDecision:
        """Strict resolution with a one-step yes/no confirmation.

        Confidence at or above accept executes; the clarify band asks
        "Did you mean to ...?" and remembers the candidate for the author
        and channel; anything lower lists the available commands. A
        follow-up reply to a pending question is classified first: yes
        executes the remembered candidate, no cancels, anything else is
        resolved as a fresh utterance.
        """
        with resolution_scope():
            return await self._resolve_with_confirmation(utterance, templates, context)

    async def _resolve_with_confirmation(
        self,
        utterance: Utterance,
        templates: list[CommandTemplate],
        context: ConversationContext | None,
    ) -> ResolutionDecision:
        pending = self.confirmations.pop(utterance.author.id, utterance.channel_id)
        if pending is not None:
            if is_negative_response(utterance.content):
                self._prepare_context(utterance, context)
                return self._converse(utterance, CANCELLED_REPLY, INTENT_CANCELLED)
            if is_affirmative_response(utterance.content):
                self._prepare_context(utterance, context)
                return await self._execute(
                    pending.candidate, utterance, matcher="confirmation", params=pending.params
                )

        active = [t for t in templates if t.is_active]
        context = self._prepare_context(utterance, context)

        if not active:
            return self._converse(utterance, NO_TEMPLATES_REPLY, INTENT_NO_TEMPLATES)

        candidate: MatchCandidate | None = None
        matcher_name = self.heuristic.name

        for matcher in self.matchers:
            result = await self._run_matcher(matcher, utterance, active, context)
            if result is None:
                continue
            if result.is_conversational:
                return self._converse(utterance, result.conversational_response, INTENT_MODEL)
            if result.best is not None:
                candidate = result.best
                matcher_name = matcher.name
                break

        if candidate is None and self.heuristic.is_rejected(utterance.content, active):
            intent = detect_conversational_intent(utterance.content)
            return self._converse(utterance, canned_reply(intent, active), intent)

        if candidate is not None and candidate.confidence >= self.thresholds.accept:
            return await self._execute(candidate, utterance, matcher=matcher_name)

        if candidate is not None and candidate.confidence >= self.thresholds.clarify:
            params = self._resolve_params(
                candidate, utterance, from_model=matcher_name != self.heuristic.name
            )
            self.confirmations.put(utterance.author.id, utterance.channel_id, candidate, params)
            question = f"Did you mean to {candidate.template.name}? Please confirm (yes/no)."
            logger.info(
                "Asking for confirmation",
                extra={
                    "decision": Clarify.kind,
                    "template_id": candidate.template.id,
                    "confidence": round(candidate.confidence, 4),
                    "matcher": matcher_name,
                    "channel_id": utterance.channel_id,
                },
            )
            return Clarify(
                question=question,
                template=candidate.template,
                options=[candidate.template.name],
            )

        return self._clarify_with_listing(utterance, active)

    def _prepare_context(
        self, utterance: Utterance, context: ConversationContext | None
    ) -> ConversationContext | None:
        """Build context from the store, then remember the incoming turn."""
        if self.context_store is None:
            return context

        if context is None:
            context = self.context_store.build_context(
                utterance.channel_id, utterance.reply_to_message_id
            )
        if utterance.message_id:
            self.context_store.record(
                channel_id=utterance.channel_id,
                message_id=utterance.message_id,
                author_id=utterance.author.id,
                content=utterance.content,
            )
        return context

    async def _run_matcher(
        self,
        matcher: Matcher,
        utterance: Utterance,
        templates: list[CommandTemplate],
        context: ConversationContext | None,
    ) -> MatchResult | None:
        """Run one matcher of the chain; None means move on to the next."""
        try:
            result = await matcher.match(
                utterance.content, templates, mentions=utterance.mentions, context=context
            )
        except MatcherUnavailable as e:
            logger.warning("Matcher %s unavailable, falling back: %s", matcher.name, e)
            return None
        if result.degraded:
            logger.warning("Matcher %s result degraded, falling back", matcher.name)
            return None
        return result

    def _accepts(self, matcher: Matcher, candidate: MatchCandidate, text: str) -> bool:
        """Heuristic scores must exceed their threshold; other matchers need accept."""
        if matcher is self.heuristic:
            return candidate.confidence > self.heuristic.acceptance_threshold(text)
        return candidate.confidence >= self.thresholds.accept

    def _resolve_params(
        self, candidate: MatchCandidate, utterance: Utterance, from_model: bool
    ) -> dict[str, str]:
        """Merge parameter sources: mentions < text extraction < model.

        Only placeholders the template uses are kept. A still-missing
        ``{user}`` is filled by a bare-id scan, and ``{amount}`` is clamped.
        """
        template = candidate.template
        content = utterance.content
        wanted = set(template.pattern_placeholders) | set(template.output_placeholders)

        params: dict[str, str] = {}
        params.update(mention_params(content, utterance.mentions))
        params.update(
            extract_parameters(
                content, template.natural_language_pattern, utterance.mentions, self.id_shape
            )
        )
        if from_model:
            for key, value in candidate.params.items():
                if key == "user":
                    value = mention_target(value) or value
                params[key] = value
        else:
            params.update(candidate.params)

        if "user" in wanted and not params.get("user"):
            bare_id = self.id_shape.find(strip_mentions(content))
            if bare_id:
                params["user"] = bare_id

        amount = params.get("amount")
        if amount is not None and DIGITS_RE.match(amount):
            params["amount"] = str(min(int(amount), self.amount_max))

        return {key: value for key, value in params.items() if key in wanted and value}

    async def _execute(
        self,
        candidate: MatchCandidate,
        utterance: Utterance,
        matcher: str,
        params: dict[str, str] | None = None,
    ) -> Execute:
        template = candidate.template
        if params is None:
            params = self._resolve_params(
                candidate, utterance, from_model=matcher != self.heuristic.name
            )
        rendered = render_output(template.output_template, params)

        await self._record_usage(template)

        logger.info(
            "Resolved to /%s",
            template.command_name,
            extra={
                "decision": Execute.kind,
                "template_id": template.id,
                "confidence": round(candidate.confidence, 4),
                "matcher": matcher,
                "channel_id": utterance.channel_id,
            },
        )
        return Execute(
            template=template,
            rendered_output=rendered,
            params=params,
            confidence=candidate.confidence,
            matcher=matcher,
        )

    async def _record_usage(self, template: CommandTemplate) -> None:
        template.usage_count += 1
        if self.store is None:
            return
        try:
            await self.store.increment_usage(template.id)
        except Exception as e:
            logger.warning("Failed to record usage for template %s: %s", template.id, e)

    def _converse(self, utterance: Utterance, reply: str, intent: str) -> Converse:
        logger.info(
            "Conversational reply (%s)",
            intent,
            extra={"decision": Converse.kind, "channel_id": utterance.channel_id},
        )
        return Converse(reply=reply, intent=intent)

    def _clarify_with_listing(
        self, utterance: Utterance, templates: list[CommandTemplate]
    ) -> Clarify:
        shown = templates[:CLARIFY_LIST_LIMIT]
        lines = [
            f"• {t.name}: {PLACEHOLDER_RE.sub(lambda m: f'[{m.group(1)}]', t.natural_language_pattern)}"
            for t in shown
        ]
        question = "I'm not sure which command you meant. Here's what I can do:\n" + "\n".join(lines)
        logger.info(
            "Listing commands for clarification",
            extra={"decision": Clarify.kind, "channel_id": utterance.channel_id},
        )
        return Clarify(question=question, options=[t.name for t in shown])

