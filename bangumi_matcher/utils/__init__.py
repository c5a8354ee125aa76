from .filename_parser import (
    get_file_name,
    strip_non_episode_tokens,
    guess_episode_type,
    extract_episode_number,
    is_special_episode_file,
    parse_filename_signal,
)
from .external_parser import extract_number_externally

__all__ = [
    'get_file_name',
    'strip_non_episode_tokens',
    'guess_episode_type',
    'extract_episode_number',
    'is_special_episode_file',
    'parse_filename_signal',
    'extract_number_externally',
]
