"""Rule composition for transforms.

A transform is an ordered sequence of independent rules. Each rule mutates
the cloned document held by a per-invocation ``TransformState``; an
optional condition gates whether it fires, and the factor id of every rule
that fired is recorded so later rules (analytics) can report it.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .cloner import Document
from .context import Parameters, RequestContext
from .exceptions import TemplateError
from .randomness import RandomSource


@dataclass
class TransformState:
    """Everything a rule may inspect or mutate during one invocation."""
    
    document: Document
    params: Parameters
    context: RequestContext
    rng: RandomSource
    # Values derived by earlier rules (parsed dates, labels, aggregates)
    derived: Dict[str, Any] = field(default_factory=dict)
    applied: List[str] = field(default_factory=list)


RuleFn = Callable[[TransformState], None]
Condition = Callable[[TransformState], bool]


@dataclass(frozen=True)
class Rule:
    """A named unit of business logic."""
    
    name: str
    apply: RuleFn
    condition: Optional[Condition] = None
    factor: Optional[str] = None
    
    def fires(self, state: TransformState) -> bool:
        return self.condition is None or self.condition(state)


@dataclass(frozen=True)
class Transform:
    """A fixed, ordered rule sequence selected by route."""
    
    name: str
    rules: Tuple[Rule, ...]
    required_params: Tuple[str, ...] = ()
    description: str = ""
    
    def run(
        self,
        document: Document,
        params: Parameters,
        context: RequestContext,
        rng: RandomSource,
    ) -> Document:
        """Run every rule in order over ``document`` and return it.
        
        ``ParameterError`` propagates untouched. Structural problems met
        while a rule runs become ``TemplateError``; either way the remaining
        rules are skipped and nothing partial is returned.
        """
        state = TransformState(document=document, params=params, context=context, rng=rng)
        
        for rule in self.rules:
            try:
                if not rule.fires(state):
                    continue
                rule.apply(state)
            except (KeyError, TypeError, AttributeError, IndexError) as e:
                logger.error(f"Rule '{rule.name}' of transform '{self.name}' failed: {e!r}")
                raise TemplateError(
                    f"Template for transform '{self.name}' is unsuitable for rule "
                    f"'{rule.name}': {e!r}"
                ) from e
            if rule.factor is not None:
                state.applied.append(rule.factor)
            logger.debug(f"[{context.request_id}] rule fired: {rule.name}")
        
        return state.document


def compose(name: str, rules: Sequence[Rule], **kwargs) -> Transform:
    """Build a ``Transform`` from an ordered list of rules."""
    names = [rule.name for rule in rules]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate rule names in transform '{name}': {names}")
    return Transform(name=name, rules=tuple(rules), **kwargs)
