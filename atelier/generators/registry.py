"""Generator registry: which AdviceGenerator serves which intent."""

from collections.abc import Callable
from functools import partial

from atelier.config.models.generation import GeneratorModelConfig, ModelsConfig
from atelier.generators.ask_user_info import AskUserInfoGenerator
from atelier.generators.base import AdviceGenerator, GeneratorDeps
from atelier.generators.color_analysis import ColorAnalysisGenerator
from atelier.generators.text_advice import (
    GENERAL,
    OCCASION,
    PAIRING,
    VACATION,
    TextAdviceGenerator,
)
from atelier.generators.vibe_check import VibeCheckGenerator
from atelier.intents import Intent

GeneratorFactory = Callable[[GeneratorDeps, GeneratorModelConfig], AdviceGenerator]

DEFAULT_FACTORIES: dict[Intent, GeneratorFactory] = {
    Intent.VIBE_CHECK: VibeCheckGenerator,
    Intent.COLOR_ANALYSIS: ColorAnalysisGenerator,
    Intent.PAIRING: partial(TextAdviceGenerator, PAIRING),
    Intent.OCCASION: partial(TextAdviceGenerator, OCCASION),
    Intent.VACATION: partial(TextAdviceGenerator, VACATION),
    Intent.GENERAL: partial(TextAdviceGenerator, GENERAL),
}


class GeneratorRegistry:
    """Maps intents to generators; AskUserInfo is held separately."""

    def __init__(
        self,
        generators: dict[Intent, AdviceGenerator],
        ask_user_info: AdviceGenerator,
    ) -> None:
        if Intent.GENERAL not in generators:
            raise ValueError("A general generator is required as the fallback")
        self._generators = dict(generators)
        self._ask_user_info = ask_user_info

    @property
    def ask_user_info(self) -> AdviceGenerator:
        return self._ask_user_info

    def get(self, intent: Intent) -> AdviceGenerator:
        """Generator for intent, falling back to the general one."""
        return self._generators.get(intent) or self._generators[Intent.GENERAL]

    def intents(self) -> list[Intent]:
        return list(self._generators)


def build_registry(
    deps: GeneratorDeps,
    models: ModelsConfig,
    factories: dict[Intent, GeneratorFactory] | None = None,
) -> GeneratorRegistry:
    """Build every configured generator with its model settings."""
    factories = factories or DEFAULT_FACTORIES
    generators = {
        intent: factory(deps, models.for_generator(intent.value))
        for intent, factory in factories.items()
    }
    ask_user_info = AskUserInfoGenerator(deps, models.for_generator("ask_user_info"))
    return GeneratorRegistry(generators, ask_user_info)
