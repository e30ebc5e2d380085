from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Distribution(str, Enum):
    UBUNTU = "Ubuntu"
    DEBIAN = "Debian"
    ARCH = "Arch Linux"
    FEDORA = "Fedora"
    ALPINE = "Alpine Linux"

    @property
    def slug(self) -> str:
        return self.value.lower().replace(" ", "-")


class Architecture(str, Enum):
    X86_64 = "x86_64"
    AARCH64 = "aarch64"


class GenerationState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"


class GenerationPhase(str, Enum):
    COMPOSE_PROMPT = "compose_prompt"
    REQUEST = "request"
    VALIDATE = "validate"


Severity = Literal["info", "success", "warning", "error"]


def _unique(names: List[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        unique.append(name)
    return unique


class ImageRequest(BaseModel):
    """One revision of the image configuration.

    Instances are frozen; every update returns a new revision.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    distribution: Distribution = Distribution.UBUNTU
    distribution_version: str = "24.04 LTS"
    architecture: Architecture = Architecture.X86_64
    hostname: str = "isoforge-node"
    username: str = "admin"
    password: Optional[str] = None
    packages: Tuple[str, ...] = ("vim", "curl", "docker.io", "git")
    custom_instructions: str = ""
    cloud_init_enabled: bool = True

    @field_validator("packages")
    @classmethod
    def drop_duplicate_packages(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(_unique(list(value)))

    def with_package(self, name: str) -> "ImageRequest":
        name = name.strip()
        if not name or name in self.packages:
            return self
        return self.model_copy(update={"packages": self.packages + (name,)})

    def without_package(self, name: str) -> "ImageRequest":
        if name not in self.packages:
            return self
        return self.model_copy(update={"packages": tuple(p for p in self.packages if p != name)})

    def updated(self, **fields) -> "ImageRequest":
        # Revalidated: enums are coerced and packages stay unique.
        payload = self.model_dump()
        payload.update(fields)
        return ImageRequest.model_validate(payload)


class GeneratedArtifact(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    content: str
    language: str


class BuildLogEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    timestamp: str
    message: str
    severity: Severity = "info"


class Template(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str
    request: ImageRequest


Blueprint = List[GeneratedArtifact]

# A blueprint with no artifacts is treated as a schema mismatch.
BLUEPRINT_ADAPTER: TypeAdapter[Blueprint] = TypeAdapter(
    Annotated[List[GeneratedArtifact], Field(min_length=1)]
)
