from .models import ImageRequest

SYSTEM_PROMPT = """
You are a senior Linux release engineer who builds custom bootable images.

You write unattended-installation configuration for Ubuntu (autoinstall/cloud-init),
Debian (preseed), Fedora (kickstart), Arch Linux (archinstall) and Alpine (answers files),
plus boot-loader menus and ISO build scripts.

Be concrete. Produce complete files, not outlines.
"""

BLUEPRINT_SCHEMA = """[
  {
    \"name\": string,
    \"content\": string,
    \"language\": string
  }
]"""

USER_TEMPLATE = """
Generate a complete set of configuration files for a bootable {distribution} {version} ISO.
Target Architecture: {architecture}
Hostname: {hostname}
User: {username}
Included Packages: {packages}
Cloud-Init: {cloud_init}
Custom Instructions: {custom_instructions}

Provide a professional set of files including:
1. A README.md with detailed instructions on how to use xorriso/mkisofs to build this.
2. The main installation configuration (e.g., user-data for Ubuntu/Cloud-init, preseed.cfg for Debian, or answers.yaml for Alpine).
3. A shell script (build.sh) that automates the image creation process.
4. A secondary config file (e.g., grub.cfg or isolinux.cfg).

Return ONLY valid JSON (no markdown, no code fences, no commentary).

Required schema (all keys required, no other keys):
{schema}

Hard rules (MUST follow):
- Output MUST be a single JSON array of objects with exactly the fields 'name', 'content', and 'language'.
- 'name' is the file name, 'content' is the full file body, 'language' is a syntax-highlighting hint.
- Escape newlines and quotes inside 'content' so the array stays valid JSON.
"""

ASSIST_SYSTEM_PROMPT = (
    "You are an expert Linux System Administrator specializing in custom bootable images "
    "and automated deployments."
)

ASSIST_TEMPLATE = "The user is configuring a bootable ISO for {distribution}. Question: {query}"

PACKAGE_DELIMITER = ", "


def build_blueprint_prompt(request: ImageRequest) -> str:
    return USER_TEMPLATE.format(
        distribution=request.distribution.value,
        version=request.distribution_version,
        architecture=request.architecture.value,
        hostname=request.hostname,
        username=request.username,
        packages=PACKAGE_DELIMITER.join(request.packages),
        cloud_init="Enabled" if request.cloud_init_enabled else "Disabled",
        custom_instructions=request.custom_instructions,
        schema=BLUEPRINT_SCHEMA,
    )


def build_assist_prompt(query: str, request: ImageRequest) -> str:
    return ASSIST_TEMPLATE.format(distribution=request.distribution.value, query=query)
