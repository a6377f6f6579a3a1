"""Wires the pipeline from settings."""

from guider.config import Settings, get_settings
from guider.context.assembler import ContextAssembler
from guider.context.sources import ConversationStore, PersonaResolver
from guider.guard.content_guard import ContentGuard
from guider.hooks import PipelineObserver, UsageSink
from guider.llm.client import CompletionClient, OpenRouterClient
from guider.llm.fallback import FallbackPolicy
from guider.llm.models import GenerationParams
from guider.llm.tiers import build_tiers
from guider.pipeline.completion import CompletionPipeline
from guider.prompts.library import PromptLibrary, default_prompt_library


def build_pipeline(
    store: ConversationStore,
    settings: Settings | None = None,
    *,
    persona_resolver: PersonaResolver | None = None,
    usage_sink: UsageSink | None = None,
    observer: PipelineObserver | None = None,
    client: CompletionClient | None = None,
    library: PromptLibrary | None = None,
) -> CompletionPipeline:
    """Build a CompletionPipeline.

    Args:
        store: Conversation and history source.
        settings: Application settings.
        persona_resolver: Archive persona lookup.
        usage_sink: Usage accounting sink.
        observer: Telemetry sink.
        client: Completion client; an OpenRouterClient is built if omitted.
        library: Prompt library override.

    Returns:
        A ready pipeline.

    Raises:
        ConfigurationError: If the API key is missing or the tier
            configuration is invalid.
    """
    settings = settings or get_settings()
    llm = settings.llm

    llm.require_api_key()
    tiers = build_tiers(llm)

    library = library or default_prompt_library()
    policy = FallbackPolicy(
        client=client or OpenRouterClient(llm),
        tiers=tiers,
        params=GenerationParams(max_tokens=llm.max_tokens, temperature=llm.temperature),
        free_tier_only=llm.use_free_models_only,
        observer=observer,
    )
    assembler = ContextAssembler(
        store,
        persona_resolver=persona_resolver,
        library=library,
        settings=settings.context,
    )

    return CompletionPipeline(
        guard=ContentGuard(library),
        assembler=assembler,
        policy=policy,
        usage_sink=usage_sink,
        observer=observer,
    )
