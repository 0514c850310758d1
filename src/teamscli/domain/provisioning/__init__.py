"""Provisioning of a new bot-backed Teams app."""

from .context import (
    BOT_ENDPOINT_KEY,
    BOT_ID_KEY,
    BOT_PASSWORD_KEY,
    TEAMS_APP_ID_KEY,
    GeneratedManifest,
    ManifestDocument,
    PackageSource,
    PrebuiltPackage,
    ProvisioningRequest,
    ProvisioningResult,
    ProvisioningState,
)
from .orchestrator import ProvisioningOutcome, ProvisioningPipeline, build_provisioning_pipeline
from .steps import (
    BuildPackageStep,
    CreateIdentityStep,
    CreateSecretStep,
    ImportPackageStep,
    PersistCredentialsStep,
    ProvisioningStep,
    RegisterChannelStep,
    StepFailed,
    StepOutcome,
    StepSucceeded,
    execute_step,
)

__all__ = [
    "BOT_ENDPOINT_KEY",
    "BOT_ID_KEY",
    "BOT_PASSWORD_KEY",
    "TEAMS_APP_ID_KEY",
    "BuildPackageStep",
    "CreateIdentityStep",
    "CreateSecretStep",
    "GeneratedManifest",
    "ImportPackageStep",
    "ManifestDocument",
    "PackageSource",
    "PersistCredentialsStep",
    "PrebuiltPackage",
    "ProvisioningOutcome",
    "ProvisioningPipeline",
    "ProvisioningRequest",
    "ProvisioningResult",
    "ProvisioningState",
    "ProvisioningStep",
    "RegisterChannelStep",
    "StepFailed",
    "StepOutcome",
    "StepSucceeded",
    "build_provisioning_pipeline",
    "execute_step",
]
