"""Handlers de comandos FTP, uno por módulo (``handle_<verbo>``).

Cada módulo puede declarar ``ALIASES`` con verbos alternativos (por
ejemplo ``XCWD`` para ``CWD``). Los carga `ftp_server.load_command_handlers`.
"""
