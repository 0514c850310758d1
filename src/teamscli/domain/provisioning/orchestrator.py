"""Fixed-order provisioning pipeline.

Steps run strictly in sequence and the first failure stops the run. Nothing
already created upstream is rolled back; the outcome carries the partial state
so callers can report what was left behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .context import ProvisioningResult, ProvisioningState
from .steps import (
    BuildPackageStep,
    CreateIdentityStep,
    CreateSecretStep,
    ImportPackageStep,
    PersistCredentialsStep,
    RegisterChannelStep,
    StepFailed,
    StepSucceeded,
    execute_step,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from teamscli.domain.ports import (
        ChannelRegistrar,
        CredentialSink,
        IdentityProvisioner,
        PackageImporter,
    )

    from .context import ProvisioningRequest
    from .steps import ProvisioningStep

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProvisioningOutcome:
    """Final (or last good) state of a run, plus the failure that stopped it."""

    state: ProvisioningState
    completed: tuple[str, ...] = ()
    failure: StepFailed | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> ProvisioningResult:
        """Return the result, re-raising the original error of a failed run."""

        if self.failure is not None:
            raise self.failure.error
        return ProvisioningResult.from_state(self.state)


@dataclass(slots=True)
class ProvisioningPipeline:
    steps: Sequence[ProvisioningStep] = field(default_factory=tuple)

    def run(self, request: ProvisioningRequest) -> ProvisioningOutcome:
        state = ProvisioningState(request=request)
        completed: list[str] = []
        for step in self.steps:
            log.info("Running step %s", step.name)
            outcome = execute_step(step, state)
            match outcome:
                case StepSucceeded(state=next_state):
                    state = next_state
                    completed.append(step.name)
                case StepFailed(error=error):
                    log.error("Step %s failed: %s", step.name, error)
                    for resource in state.created_resources():
                        log.warning("Left in place upstream: %s", resource)
                    return ProvisioningOutcome(
                        state=state, completed=tuple(completed), failure=outcome
                    )
        return ProvisioningOutcome(state=state, completed=tuple(completed))


def build_provisioning_pipeline(
    *,
    identities: IdentityProvisioner,
    importer: PackageImporter,
    registrar: ChannelRegistrar,
    sink: CredentialSink | None = None,
) -> ProvisioningPipeline:
    """Assemble the six provisioning steps in their required order."""

    return ProvisioningPipeline(
        steps=(
            CreateIdentityStep(identities),
            BuildPackageStep(),
            CreateSecretStep(identities),
            ImportPackageStep(importer),
            RegisterChannelStep(registrar),
            PersistCredentialsStep(sink),
        )
    )
