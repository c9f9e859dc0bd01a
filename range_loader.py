# -*- coding: utf-8 -*-
"""
Created on Mon Nov 11 15:48:20 2024

Time-range loading of STR and TOA5 files. The sequence is:
    1. resolve the candidate files (directory listing or explicit list);
    2. get the time coverage of each candidate (filename or file content);
    3. stable sort the candidates by start date;
    4. select the files whose coverage may intersect [mindate, maxdate);
    5. load each selected file with the column schema resolved from the
       headers of all selected files;
    6. concatenate in sorted-file order (then stable sort on time);
    7. trim the rows to [mindate, maxdate] (closed at both ends).

Step 4 is a coarse file-level filter and step 7 the exact row-level filter;
both are needed. Any file parse failure aborts the whole load - there are no
partial results.
"""

import logging
import pathlib
import re

import numpy as np
import pandas as pd

import config_getters as cg
import dir_functions as dirf
import file_io as fio
import time_functions as tf
from column_spec import ColumnSpec

#------------------------------------------------------------------------------
### CONSTANTS ###
#------------------------------------------------------------------------------

COVERAGE_COLUMNS = ['file', 'start_date', 'end_date']

#------------------------------------------------------------------------------
### FUNCTIONS ###
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def str_load(
        source, mindate=None, maxdate=None, columns=None, max_depth=None,
        config_file=None
        ):
    """
    Load data from Aerodyne STR files generated by TDLWintel.

    Parameters
    ----------
    source : str, pathlib.Path or list
        A directory (searched for files named YYMMDD_HHMMSS.str), a single
        STR file or a list of STR files.
    mindate : str or datetime, optional
        Load data including and after this date and time. The default is None.
    maxdate : str or datetime, optional
        Load data up to and including this date and time. The default is None.
    columns : list, str or re.Pattern, optional
        Columns to return. The default is None (all columns).
    max_depth : int, optional
        Directory recursion depth (1 is the source directory only).
        The default is None (configured default).
    config_file : str or pathlib.Path, optional
        YAML file with loader configuration overrides. The default is None.

    Returns
    -------
    pd.core.frame.DataFrame
        Data indexed by time.

    """

    return load_range(
        source=source, file_type='STR', mindate=mindate, maxdate=maxdate,
        columns=columns, max_depth=max_depth, config_file=config_file
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def toa5_load(
        source, root_name=None, mindate=None, maxdate=None, columns=None,
        max_depth=None, header_output=False, config_file=None,
        string_columns=None, integer_columns=None, time_columns=None,
        header_lines=None
        ):
    """
    Load TOA5 data files generated by Campbell Scientific dataloggers.

    Parameters
    ----------
    source : str, pathlib.Path or list
        A directory (searched for .dat files), a single file or a list of
        files.
    root_name : str, optional
        Regular expression the file base names must match, e.g.
        "Dedelow_CR3000" for "Dedelow_CR3000_Soil.dat". The default is None.
    mindate : str or datetime, optional
        Load data including and after this date and time. The default is None.
    maxdate : str or datetime, optional
        Load data up to and including this date and time. The default is None.
    columns : list, str or re.Pattern, optional
        Columns to return. The default is None (all columns).
    max_depth : int, optional
        Directory recursion depth (1 is the source directory only).
        The default is None (configured default).
    header_output : bool, optional
        Also return the header dataframe and station info of the last file
        loaded. The default is False.
    config_file : str or pathlib.Path, optional
        YAML file with loader configuration overrides. The default is None.
    string_columns : list, optional
        Regular expressions for additional columns to read as strings.
        The default is None.
    integer_columns : list, optional
        Regular expressions for additional columns to read as integers.
        The default is None.
    time_columns : list, optional
        Regular expressions for additional columns to read as timestamps.
        The default is None.
    header_lines : int, optional
        Number of lines preceding the data. The default is None (4).

    Returns
    -------
    pd.core.frame.DataFrame or tuple
        Data indexed by time; (data, headers, info) if header_output.

    """

    return load_range(
        source=source, file_type='TOA5', mindate=mindate, maxdate=maxdate,
        columns=columns, root_name=root_name, max_depth=max_depth,
        header_output=header_output, config_file=config_file,
        extra_types={
            'string_columns': string_columns,
            'integer_columns': integer_columns,
            'time_columns': time_columns
            },
        header_lines=header_lines
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def load_files(files, file_type, columns=None):
    """
    Load and merge a list of files in time order with no date window.

    Parameters
    ----------
    files : list
        The files.
    file_type : str
        The type of file (must be either "TOA5" or "STR").
    columns : list, str or re.Pattern, optional
        Columns to return. The default is None (all columns).

    Returns
    -------
    pd.core.frame.DataFrame
        Data indexed by time.

    """

    return load_range(source=list(files), file_type=file_type, columns=columns)
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def load_range(
        source, file_type, mindate=None, maxdate=None, columns=None,
        root_name=None, max_depth=None, header_output=False, config_file=None,
        extra_types=None, header_lines=None
        ):
    """
    Load the files of the given type covering the date window.

    Parameters
    ----------
    source : str, pathlib.Path or list
        A directory, a single file or a list of files.
    file_type : str
        The type of file (must be either "TOA5" or "STR").
    mindate : str or datetime, optional
        Lower (inclusive) bound of the window. The default is None.
    maxdate : str or datetime, optional
        Upper bound of the window (files starting at or after it are not
        loaded; rows at it are kept). The default is None.
    columns : list, str or re.Pattern, optional
        Columns to return. The default is None (all columns).
    root_name : str, optional
        Regular expression the file base names must match. The default is
        None.
    max_depth : int, optional
        Directory recursion depth. The default is None (configured default).
    header_output : bool, optional
        Also return headers and station info (TOA5 only). The default is
        False.
    config_file : str or pathlib.Path, optional
        YAML file with loader configuration overrides. The default is None.
    extra_types : dict, optional
        "string_columns", "integer_columns" and "time_columns" regular
        expression lists added to the configured ones for this call.
        The default is None.
    header_lines : int, optional
        Number of lines preceding the data. The default is None (the number
        configured for the file type).

    Raises
    ------
    FileNotFoundError
        Raised if the source (or a listed file) does not exist.
    file_io.FileParseError
        Raised if any selected file cannot be parsed.

    Returns
    -------
    pd.core.frame.DataFrame or tuple
        Data indexed by time; (data, headers, info) if header_output.

    """

    # Check everything before any file is touched
    fio.get_file_type_configs(file_type=file_type)
    if header_output and not file_type == 'TOA5':
        raise NotImplementedError('Header output only available for TOA5!')
    mindate, maxdate = tf.check_window(mindate=mindate, maxdate=maxdate)
    column_spec = ColumnSpec.from_arg(columns=columns)
    configs = cg.get_loader_configs(
        file_type=file_type, config_file=config_file
        )
    if max_depth is None:
        max_depth = configs['max_depth']
    for key, patterns in (extra_types if extra_types else {}).items():
        if patterns is None:
            continue
        if isinstance(patterns, str):
            patterns = [patterns]
        configs[key] = configs.get(key, []) + list(patterns)

    # Get the files and their coverage, then select
    files = get_candidate_files(
        source=source, file_type=file_type, root_name=root_name,
        max_depth=max_depth
        )
    coverage = get_file_coverage(files=files, file_type=file_type)
    selected = select_files(
        coverage=coverage, mindate=mindate, maxdate=maxdate
        )
    logging.info(
        f'Selected {len(selected)} of {len(coverage)} {file_type} files'
        )

    # Load, merge and trim
    data, schema = merge_files(
        files=selected.file.tolist(), file_type=file_type,
        column_spec=column_spec, extra_types=configs,
        n_header_lines=header_lines
        )
    data = trim_to_window(data=data, mindate=mindate, maxdate=maxdate)
    if not header_output:
        return data
    headers, info = None, None
    if len(selected):
        last_file = selected.file.iloc[-1]
        headers = (
            fio.get_header_df(file=last_file)
            .reindex([fio.FILE_CONFIGS['TOA5']['time_variable']] + schema)
            .fillna('')
            )
        info = fio.get_file_info(file=last_file)
    return data, headers, info
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_candidate_files(source, file_type, root_name=None, max_depth=None):
    """
    Resolve the candidate files from the source.

    Parameters
    ----------
    source : str, pathlib.Path or list
        A directory (listed recursively for files of the type), a single file
        or a list of files (used as is).
    file_type : str
        The type of file (must be either "TOA5" or "STR").
    root_name : str, optional
        Regular expression the file base names must match. The default is
        None.
    max_depth : int, optional
        Directory recursion depth. The default is None (no limit).

    Raises
    ------
    FileNotFoundError
        Raised if the source (or a listed file) does not exist.

    Returns
    -------
    list
        The candidate files in discovery order.

    """

    if isinstance(source, (str, pathlib.PurePath)):
        path = pathlib.Path(source)
        if path.is_dir():
            logging.info(f'Listing {file_type} files in {path}')
            files = dirf.get_directory_listing(
                roots=path,
                max_depth=max_depth,
                name_filter=fio.get_file_type_configs(
                    file_type=file_type, return_field='file_regex'
                    )
                )[0]
        elif path.is_file():
            files = [path]
        else:
            msg = f'{path} is not a valid file or directory!'
            logging.error(msg); raise FileNotFoundError(msg)
    else:
        files = [pathlib.Path(file) for file in source]
        missing = [str(file) for file in files if not file.is_file()]
        if missing:
            msg = f'Files not found: {missing}'
            logging.error(msg); raise FileNotFoundError(msg)
    if root_name:
        regex = re.compile(root_name)
        files = [file for file in files if regex.search(file.name)]
    if not files:
        logging.warning('No candidate files found!')
    return files
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_file_coverage(files, file_type):
    """
    Get the time coverage of each file, stable sorted by start date. Where the
    end date of a file is unknown it is taken from the start date of the next
    file (or its own start date if it is the last file). Files with no valid
    records are dropped.

    Parameters
    ----------
    files : list
        The files.
    file_type : str
        The type of file (must be either "TOA5" or "STR").

    Returns
    -------
    pd.core.frame.DataFrame
        Columns "file", "start_date" and "end_date".

    """

    records = []
    for file in files:
        dates = fio.get_start_end_dates(file=file, file_type=file_type)
        if dates['start_date'] is None:
            logging.warning(f'No valid records in {file}; skipping')
            continue
        records.append({'file': pathlib.Path(file), **dates})
    df = pd.DataFrame(records, columns=COVERAGE_COLUMNS)
    df['start_date'] = pd.to_datetime(df.start_date)
    df['end_date'] = pd.to_datetime(df.end_date)
    df = df.sort_values('start_date', kind='mergesort').reset_index(drop=True)
    df['end_date'] = (
        df.end_date
        .fillna(df.start_date.shift(-1))
        .fillna(df.start_date)
        )
    return df
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def select_files(coverage, mindate=None, maxdate=None):
    """
    Select the files whose coverage may intersect [mindate, maxdate). The
    first file kept is the last one starting at or before mindate (or the
    first of several sharing that start); the last file kept is the last one
    starting before maxdate.

    Parameters
    ----------
    coverage : pd.core.frame.DataFrame
        Coverage as returned by get_file_coverage (sorted by start date).
    mindate : pd.Timestamp, optional
        Lower bound. The default is None (from the first file).
    maxdate : pd.Timestamp, optional
        Upper bound. The default is None (to the last file).

    Returns
    -------
    pd.core.frame.DataFrame
        The selected rows of the coverage dataframe.

    """

    starts = pd.DatetimeIndex(coverage.start_date)
    first, last = 0, len(starts)
    if mindate is not None and last:
        i = int(starts.searchsorted(pd.Timestamp(mindate), side='right')) - 1
        if i >= 0:
            first = int(starts.searchsorted(starts[i], side='left'))
    if maxdate is not None:
        last = int(starts.searchsorted(pd.Timestamp(maxdate), side='left'))
    return coverage.iloc[first: max(first, last)]
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def merge_files(
        files, file_type, column_spec=None, extra_types=None,
        n_header_lines=None
        ):
    """
    Load the files and concatenate them in the order passed. The column
    schema is resolved from the headers of all files before any data is read;
    columns missing from a file are filled with missing values.

    Parameters
    ----------
    files : list
        The files, in time order.
    file_type : str
        The type of file (must be either "TOA5" or "STR").
    column_spec : ColumnSpec, optional
        The column selection. The default is None (all columns).
    extra_types : dict, optional
        Additional type lists (see file_io.get_column_types). The default is
        None.
    n_header_lines : int, optional
        Number of lines preceding the data. The default is None (the number
        configured for the file type).

    Returns
    -------
    tuple
        (data, schema) - the merged data and the list of its columns.

    """

    if column_spec is None:
        column_spec = ColumnSpec.from_arg()
    available = [
        fio.get_column_names(file=file, file_type=file_type) for file in files
        ]
    schema = column_spec.resolve(
        available=available,
        exclude=[fio.FILE_CONFIGS[file_type]['time_variable']]
        )
    if not files or (not schema and not column_spec.kind == ColumnSpec.ALL):
        return _make_empty_table(columns=schema), schema

    logging.info('Loading:')
    df_list = []
    for file in files:
        logging.info(f'    {file}')
        df_list.append(
            fio.get_data(
                file=file, file_type=file_type, usecols=schema,
                extra_types=extra_types, n_header_lines=n_header_lines
                )
            .reindex(columns=schema)
            )
    df = pd.concat(df_list)
    df.index.name = fio.INDEX_NAME
    return df.sort_index(kind='mergesort'), schema
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def trim_to_window(data, mindate=None, maxdate=None):
    """
    Drop the rows outside [mindate, maxdate] (closed at both ends).

    Parameters
    ----------
    data : pd.core.frame.DataFrame
        Data indexed by time.
    mindate : pd.Timestamp, optional
        Lower bound. The default is None.
    maxdate : pd.Timestamp, optional
        Upper bound. The default is None.

    Returns
    -------
    pd.core.frame.DataFrame
        The trimmed data.

    """

    keep = np.ones(len(data), dtype=bool)
    if mindate is not None:
        keep &= data.index >= mindate
    if maxdate is not None:
        keep &= data.index <= maxdate
    return data[keep]
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _make_empty_table(columns):

    return pd.DataFrame(
        columns=columns, index=pd.DatetimeIndex([], name=fio.INDEX_NAME)
        )
#------------------------------------------------------------------------------
