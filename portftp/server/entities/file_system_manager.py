import os
import logging

logger = logging.getLogger(__name__)

# =============================================================================
# PATH RESOLUTION
# =============================================================================

def resolve_path(current_directory, requested_path):
    """
    Resuelve una ruta pedida por el cliente contra el directorio actual.

    Las rutas absolutas reemplazan al directorio actual; una ruta vacía
    devuelve el propio directorio actual.

    Returns:
        str: Ruta del filesystem normalizada
    """
    if not requested_path:
        return current_directory
    return os.path.normpath(os.path.join(current_directory, requested_path))

# =============================================================================
# FILE SYSTEM QUERIES
# =============================================================================

def directory_exists(path):
    """Verifica si `path` es un directorio existente"""
    return os.path.isdir(path)


def path_exists(path):
    """Verifica si `path` existe (archivo o directorio)"""
    return os.path.lexists(path)


def list_directory_names(path):
    """
    Lista solo los nombres de las entradas de un directorio.

    Returns:
        list | None: nombres ordenados, o None si no se pudo leer
    """
    try:
        return sorted(os.listdir(path))
    except (OSError, ValueError) as e:
        logger.info("Cannot list %s: %s", path, e)
        return None

# =============================================================================
# DIRECTORY OPERATIONS
# =============================================================================

def create_directory(path):
    """
    Crea un directorio. Si ya existe no es un error.

    Returns:
        tuple: (success, message)
    """
    try:
        if not os.path.isdir(path):
            os.mkdir(path)
            logger.info("Created directory %s", path)
        return True, f'Successfully created "{path}".'
    except (OSError, ValueError) as e:
        return False, f'Error creating "{path}": {_reason(e)}.'


def remove_directory(path):
    """
    Elimina un directorio vacío.

    Returns:
        tuple: (success, message)
    """
    try:
        os.rmdir(path)
        logger.info("Removed directory %s", path)
        return True, f'Successfully deleted "{path}".'
    except (OSError, ValueError) as e:
        return False, f'Error deleting "{path}": {_reason(e)}.'


def _reason(error):
    # ValueError (p. ej. un NUL en la ruta) no trae strerror
    return getattr(error, 'strerror', None) or error
