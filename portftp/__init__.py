"""portftp: servidor FTP (RFC-959) en modo activo y cliente de consola."""

__version__ = "0.1.0"
