from .models import Architecture, Distribution, ImageRequest, Template

TEMPLATES: tuple[Template, ...] = (
    Template(
        id="ubuntu-server",
        name="Ubuntu Server",
        description="Minimal, secure server footprint",
        request=ImageRequest(
            distribution=Distribution.UBUNTU,
            distribution_version="24.04 LTS",
            architecture=Architecture.X86_64,
            hostname="ubuntu-srv",
            username="sysadmin",
            packages=("openssh-server", "htop", "curl", "ufw", "fail2ban"),
            custom_instructions="Enable UFW and allow port 22 by default. Set up a basic hardening script.",
            cloud_init_enabled=True,
        ),
    ),
    Template(
        id="debian-desktop",
        name="Debian Workstation",
        description="GNOME desktop with productivity tools",
        request=ImageRequest(
            distribution=Distribution.DEBIAN,
            distribution_version="12 (Bookworm)",
            architecture=Architecture.X86_64,
            hostname="debian-work",
            username="user",
            packages=("task-gnome-desktop", "firefox-esr", "libreoffice", "vlc", "git"),
            custom_instructions="Install non-free firmware and configure desktop environment scaling for 4K.",
            cloud_init_enabled=False,
        ),
    ),
    Template(
        id="fedora-cloud",
        name="Fedora Cloud-Init",
        description="Cloud-ready instance for AWS/GCP",
        request=ImageRequest(
            distribution=Distribution.FEDORA,
            distribution_version="40",
            architecture=Architecture.X86_64,
            hostname="fedora-cloud-node",
            username="fedora",
            packages=("python3", "dnf-plugins-core", "qemu-guest-agent", "cockpit"),
            custom_instructions="Configure cockpit for remote management and optimize swap settings for cloud instances.",
            cloud_init_enabled=True,
        ),
    ),
)


def get_template(template_id: str) -> Template:
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    raise KeyError(f"unknown template: {template_id}")
