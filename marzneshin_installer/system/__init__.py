"""Host system preparation."""

from .host import HostPreparer, OSInfo, parse_os_release

__all__ = ["HostPreparer", "OSInfo", "parse_os_release"]
