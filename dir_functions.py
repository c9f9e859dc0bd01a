# -*- coding: utf-8 -*-
"""
Created on Mon Nov  4 09:12:40 2024

Bounded-depth recursive listing of files and directories under one or more
root directories. Levels are processed breadth-first: the root(s) are level 1,
their subdirectories level 2 and so on. All roots share the one leveled
traversal, so the depth limit is global and not per root.

Nested or duplicate roots are NOT deduplicated - if one root is an ancestor of
another, files under the overlap are listed twice. Callers that care must
pass disjoint roots.

Symbolic links to directories are followed and visited paths are not
tracked, so a link cycle repeats its files at every level until max_depth
is reached (or the OS refuses the path as too deep). Pass a max_depth that
fits the tree when links may be present.
"""

import logging
import pathlib
import re

#------------------------------------------------------------------------------
### FUNCTIONS ###
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_directory_listing(
        roots, max_depth=None, name_filter=None, return_errors=False
        ):
    """
    List all files and directories under the passed root(s).

    Parameters
    ----------
    roots : str, pathlib.Path or list
        Root directory or sequence of root directories.
    max_depth : int, optional
        Recursion depth (1 is the root directory only). The default is None
        (no limit).
    name_filter : str or re.Pattern, optional
        Regular expression that file paths must match (searched anywhere in
        the full path). Directories are never filtered. The default is None.
    return_errors : bool, optional
        If true, also return the list of (directory, exception) tuples for
        directories that could not be listed. The default is False.

    Returns
    -------
    tuple
        (files, dirs) or (files, dirs, errors) if return_errors is true.

    """

    files, dirs, errors = [], [], []
    for level in iter_directory_levels(roots=roots, max_depth=max_depth):
        files += level['files']
        dirs += level['dirs']
        errors += level['errors']
    files = filter_paths(paths=files, name_filter=name_filter)
    if return_errors:
        return files, dirs, errors
    return files, dirs
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def iter_directory_levels(roots, max_depth=None):
    """
    Generator yielding the results of the traversal one level at a time.

    Parameters
    ----------
    roots : str, pathlib.Path or list
        Root directory or sequence of root directories.
    max_depth : int, optional
        Recursion depth (1 is the root directory only). The default is None.

    Raises
    ------
    ValueError
        Raised if max_depth is less than 1.

    Yields
    ------
    dict
        Level number, and the files, directories and listing errors found at
        that level.

    """

    if max_depth is not None and max_depth < 1:
        raise ValueError('max_depth must be >= 1 (1 is the root directory)!')
    frontier = _make_frontier(roots=roots)
    level = 1
    while frontier and (max_depth is None or level <= max_depth):
        files, dirs, errors = [], [], []
        for directory in frontier:
            children, error = list_directory(directory=directory)
            if error is not None:
                errors.append((directory, error))
            for child in children:
                path_type = get_path_type(path=child)
                if path_type == 'file':
                    files.append(child)
                elif path_type == 'directory':
                    dirs.append(child)
        yield {'level': level, 'files': files, 'dirs': dirs, 'errors': errors}
        frontier = tuple(dirs)
        level += 1
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def list_directory(directory):
    """
    List the immediate children of a directory.

    Parameters
    ----------
    directory : str or pathlib.Path
        The directory to list.

    Returns
    -------
    tuple
        (children, error) - children is a sorted list of full paths (empty if
        the listing failed), error is the OSError raised or None.

    """

    directory = pathlib.Path(directory)
    try:
        names = sorted(child.name for child in directory.iterdir())
    except OSError as e:
        logging.warning(
            f'Failed reading directory {directory} ({e}); continuing...'
            )
        return [], e
    return [directory / name for name in names], None
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_path_type(path):
    """
    Probe the path type.

    Parameters
    ----------
    path : str or pathlib.Path
        The path to probe.

    Returns
    -------
    str or None
        "directory", "file" or None if neither (e.g. broken link) or if the
        probe itself failed.

    """

    path = pathlib.Path(path)
    try:
        if path.is_dir():
            return 'directory'
        if path.is_file():
            return 'file'
    except OSError:
        return None
    return None
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def filter_paths(paths, name_filter=None):
    """
    Return only the paths whose full path string matches the filter.

    Parameters
    ----------
    paths : list
        The paths to filter.
    name_filter : str or re.Pattern, optional
        The regular expression. The default is None (no filtering).

    Returns
    -------
    list
        The matching paths, in original order.

    """

    if not name_filter:
        return list(paths)
    regex = re.compile(name_filter)
    return [path for path in paths if regex.search(str(path))]
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _make_frontier(roots):

    if isinstance(roots, (str, pathlib.PurePath)):
        roots = [roots]
    return tuple(pathlib.Path(root) for root in roots)
#------------------------------------------------------------------------------
