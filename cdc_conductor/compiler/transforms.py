"""Compilation of a pipeline's transform chain and its predicates."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from cdc_conductor.domain.models import Transform
from cdc_conductor.errors import InvalidArgumentError

PREDICATE_PREFIX = "p"


@dataclass(frozen=True)
class TransformationDescriptor:
    type: str
    config: Dict[str, Any]
    predicate: Optional[str] = None
    negate: bool = False

    def to_spec(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {"type": self.type, "config": dict(self.config)}
        if self.predicate is not None:
            spec["predicate"] = self.predicate
            spec["negate"] = self.negate
        return spec


@dataclass(frozen=True)
class PredicateDescriptor:
    type: str
    config: Dict[str, Any]

    def to_spec(self) -> Dict[str, Any]:
        return {"type": self.type, "config": dict(self.config)}


@dataclass
class CompiledTransforms:
    transformations: List[TransformationDescriptor] = field(default_factory=list)
    predicates: Dict[str, PredicateDescriptor] = field(default_factory=dict)


def predicate_alias(transform: Transform) -> str:
    """Alias of the predicate attached to ``transform``; stable across redeploys."""
    return f"{PREDICATE_PREFIX}{transform.id}"


class PredicateTransformCompiler:
    """Turn ordered transforms into transformation descriptors plus a predicate map."""

    def compile(self, transforms: Sequence[Transform]) -> CompiledTransforms:
        """Compile ``transforms`` in the given order.

        Raises:
            InvalidArgumentError: If a transform has no type or two transforms
                share an id (their predicate aliases would collide)
        """
        compiled = CompiledTransforms()
        seen = set()

        for transform in transforms:
            if transform.id in seen:
                raise InvalidArgumentError(
                    f"Duplicate transform id {transform.id}: predicate aliases must be unique"
                )
            seen.add(transform.id)

            if not transform.type:
                raise InvalidArgumentError(
                    f"Transform {transform.id} must specify a type"
                )

            predicate = transform.predicate
            if predicate is None:
                compiled.transformations.append(
                    TransformationDescriptor(
                        type=transform.type, config=dict(transform.config)
                    )
                )
                continue

            alias = predicate_alias(transform)
            compiled.transformations.append(
                TransformationDescriptor(
                    type=transform.type,
                    config=dict(transform.config),
                    predicate=alias,
                    negate=predicate.negate,
                )
            )
            compiled.predicates[alias] = PredicateDescriptor(
                type=predicate.type, config=dict(predicate.config)
            )

        return compiled
