"""devbootstrap — workstation bootstrap: ansible, secrets, dotfiles clone, playbook."""

__version__ = "0.1.0"
