# -*- coding: utf-8 -*-
"""
Created on Fri Nov  8 09:30:14 2024

Todo:
    - STR files written by older TDLWintel versions carry a second header
    line; these are not handled yet

Contains basic file input functions and structural configurations for
handling both Campbell Scientific TOA5 and Aerodyne TDLWintel STR files. It
has functions to retrieve headers, column names and types, time coverage and
data. It is strictly tasked with parsing files between disk and memory,
checking only structural integrity of the files. It does NOT evaluate data
integrity!
"""

import csv
import datetime as dt
import logging
import os
import pathlib
import re

import pandas as pd

import time_functions as tf

###############################################################################
### CONSTANTS ###
###############################################################################



FILE_CONFIGS = {
    'TOA5': {
        'file_regex': r'\.dat$',
        'info_line': 0,
        'header_lines': {'variable': 1, 'units': 2, 'sampling': 3},
        'n_header_lines': 4,
        'separator': ',',
        'time_variable': 'TIMESTAMP',
        'na_values': ['NAN', '"NAN"'],
        'unique_file_id': 'TOA5',
        'encoding': 'latin-1',
        'string_columns': [
            'OSVersion', 'ProgName', 'CompileResults', 'CardStatus',
            'IPInfo', 'pppDialResponse', r'DataTableName\(\d\)',
            r'PortConfig\(\d\)', 'IPAddressEth', 'IPMaskEth', 'IPGateway',
            'pppIPAddr', 'pppUsername', 'pppPassword', 'pppDial', 'Messages'
            ],
        'integer_columns': ['RECORD', 'TCPPort'],
        'time_columns': ['TIMESTAMP', 'StartTime', 'LastSystemScan']
        },
    'STR': {
        'file_regex': r'\d{6}_\d{6}\.str$',
        'info_line': None,
        'header_lines': {'variable': 0},
        'n_header_lines': 1,
        'separator': r'\s+',
        'time_variable': 'time',
        'na_values': ['NAN', 'NaN'],
        'unique_file_id': 'SPEC:',
        'encoding': 'latin-1',
        'string_columns': ['^SPEFile$'],
        'integer_columns': ['^StatusW$'],
        'time_columns': []
        }
    }

INFO_FIELDS = [
    'format', 'station_name', 'logger_type', 'serial_num', 'OS_version',
    'program_name', 'program_sig', 'table_name'
    ]

TOA5_DATE_FORMATS = ['%Y-%m-%d %H:%M:%S', '%Y-%m-%d %H:%M:%S.%f']

INDEX_NAME = 'DATETIME'



###############################################################################
### CLASSES ###
###############################################################################



#------------------------------------------------------------------------------
class FileParseError(RuntimeError):

    def __init__(self, file, msg):

        self.file = pathlib.Path(file)
        super().__init__(f'Cannot parse file {self.file}: {msg}')
#------------------------------------------------------------------------------



###############################################################################
### BEGIN HEADER FUNCTIONS ###
###############################################################################



#------------------------------------------------------------------------------
def get_file_headers(file, begin, end, sep=',', encoding='latin-1'):
    """
    Get a list of the header strings.

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.
    begin : int
        Line number of first header line.
    end : int
        Line number of last header line.
    sep : str, optional
        The separator. The default is ','.
    encoding : str, optional
        The file encoding. The default is 'latin-1' (LoggerNet writes
        Windows code page files, e.g. the degree sign as a single byte).

    Raises
    ------
    FileParseError
        Raised if the file cannot be read or has fewer lines than required.

    Returns
    -------
    headers : list
        List of the split header lines.

    """

    line_list = []
    try:
        with open(file, 'r', encoding=encoding) as f:
            for i in range(end + 1):
                line = f.readline()
                if not line:
                    raise FileParseError(
                        file, f'expected {end + 1} header lines, found {i}'
                        )
                if not i < begin:
                    line_list.append(line)
    except (OSError, UnicodeDecodeError) as e:
        raise FileParseError(file, str(e)) from e
    return [line for line in csv.reader(line_list, delimiter=sep)]
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_file_type(file):
    """
    Get the file type (TOA5 or STR).

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.

    Raises
    ------
    TypeError
        Raised if file type not recognised.

    Returns
    -------
    file_type : str
        The file type.

    """

    line = get_file_headers(file=file, begin=0, end=0)[0]
    if line and line[0].strip('"') == FILE_CONFIGS['TOA5']['unique_file_id']:
        return 'TOA5'
    if FILE_CONFIGS['STR']['unique_file_id'] in ','.join(line):
        return 'STR'
    raise TypeError('Unknown file type!')
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_column_names(file, file_type=None):
    """
    Get the column names from the file header. Duplicate names are renamed
    with a numeric suffix (e.g. "Traw", "Traw-2").

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.
    file_type : str, optional
        The type of file (must be either "TOA5" or "STR").
        The default is None (detect).

    Returns
    -------
    list
        The column names (the time column first).

    """

    if not file_type:
        file_type = get_file_type(file)
    _check_format(fmt=file_type)
    return deduplicate_names(
        {'TOA5': _get_TOA5_names, 'STR': _get_STR_names}[file_type](file=file)
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _get_TOA5_names(file):

    configs = FILE_CONFIGS['TOA5']
    line = configs['header_lines']['variable']
    names = get_file_headers(
        file=file, begin=line, end=line, encoding=configs['encoding']
        )[0]
    if not names:
        raise FileParseError(file, 'empty variable header line')
    return [name.strip() for name in names]
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _get_STR_names(file):

    # Names are everything after the last "SPEC:" on the first line
    line = ','.join(get_file_headers(
        file=file, begin=0, end=0, encoding=FILE_CONFIGS['STR']['encoding']
        )[0])
    id_str = FILE_CONFIGS['STR']['unique_file_id']
    if not id_str in line:
        raise FileParseError(file, f'no "{id_str}" in first header line')
    names = [
        re.sub(r'\s+', '_', name.strip())
        for name in line[line.rfind(id_str) + len(id_str):].split(',')
        ]
    while names and not names[-1]:
        names.pop()
    return [FILE_CONFIGS['STR']['time_variable']] + names
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def deduplicate_names(names):
    """
    Rename repeated names by appending "-<occurrence>" to the second and
    subsequent occurrences.

    Parameters
    ----------
    names : list
        The names.

    Returns
    -------
    list
        The unique names.

    """

    counts = {}
    new_names = []
    for name in names:
        counts[name] = counts.get(name, 0) + 1
        if counts[name] > 1:
            new_names.append(f'{name}-{counts[name]}')
        else:
            new_names.append(name)
    return new_names
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_column_types(names, file_type, extra_types=None):
    """
    Map the column names to their types. String, integer and time lists are
    regular expressions searched in the name, applied in that order (later
    matches win); unmatched columns are float.

    Parameters
    ----------
    names : list
        The column names.
    file_type : str
        The type of file (must be either "TOA5" or "STR").
    extra_types : dict, optional
        Additional "string_columns", "integer_columns" and "time_columns"
        lists. The default is None.

    Returns
    -------
    dict
        Name: type ("float", "string", "integer" or "datetime").

    """

    _check_format(fmt=file_type)
    configs = FILE_CONFIGS[file_type]
    extra_types = extra_types if extra_types else {}
    types = {name: 'float' for name in names}
    for key, this_type in zip(
            ['string_columns', 'integer_columns', 'time_columns'],
            ['string', 'integer', 'datetime']
            ):
        patterns = configs[key] + list(extra_types.get(key, []))
        for name in names:
            if any(re.search(pattern, name) for pattern in patterns):
                types[name] = this_type
    types[configs['time_variable']] = (
        'datetime' if file_type == 'TOA5' else 'float'
        )
    return types
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_header_df(file):
    """
    Get a dataframe with variables as index and units and statistical
    sampling type as columns (TOA5 only).

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.

    Returns
    -------
    pd.core.frame.DataFrame
        Dataframe as per above.

    """

    configs = FILE_CONFIGS['TOA5']
    lines = get_file_headers(
        file=file,
        begin=min(configs['header_lines'].values()),
        end=max(configs['header_lines'].values()),
        sep=configs['separator'],
        encoding=configs['encoding']
        )
    if not lines[0]:
        raise FileParseError(file, 'empty variable header line')
    lines[0] = deduplicate_names(lines[0])
    lines[0][0] = configs['time_variable']
    n_vars = len(lines[0])

    # Units and sampling lines are forced to the length of the variable line
    for name, line in zip(list(configs['header_lines'])[1:], lines[1:]):
        if len(line) > n_vars:
            logging.warning(
                f'Header line "{name}" of {file} has {len(line)} fields '
                f'for {n_vars} variables; dropping the excess'
                )
    return (
        pd.DataFrame(
            dict(zip(
                configs['header_lines'].keys(),
                [(line + [''] * (n_vars - len(line)))[:n_vars]
                 for line in lines]
                ))
            )
        .set_index(keys='variable')
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_file_info(file):
    """
    Get the station information from the first line of the TOA5 file.

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.

    Returns
    -------
    dict
        File info with fields.

    """

    line = FILE_CONFIGS['TOA5']['info_line']
    return dict(zip(
        INFO_FIELDS,
        get_file_headers(
            file=file,
            begin=line,
            end=line,
            sep=FILE_CONFIGS['TOA5']['separator'],
            encoding=FILE_CONFIGS['TOA5']['encoding']
            )[0]
        ))
#------------------------------------------------------------------------------



###############################################################################
### END HEADER FUNCTIONS ###
###############################################################################



###############################################################################
### BEGIN DATE HANDLING FUNCTIONS ###
###############################################################################



#------------------------------------------------------------------------------
def get_start_end_dates(file, file_type=None):
    """
    Get the time coverage of the file. For STR files this is the timestamp in
    the file name (start and end are equal); for TOA5 files it is the first
    and last valid record timestamps.

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.
    file_type : str, optional
        The type of file (must be either "TOA5" or "STR").
        The default is None (detect).

    Returns
    -------
    dict
        Containing key:value pairs of start and end dates with "start_date"
        and "end_date" as keys (None if not found).

    """

    if not file_type:
        file_type = get_file_type(file)
    _check_format(fmt=file_type)
    if file_type == 'STR':
        try:
            file_time = tf.get_str_file_time(file=file)
        except ValueError as e:
            raise FileParseError(file, str(e)) from e
        return {'start_date': file_time, 'end_date': file_time}
    try:
        return _get_TOA5_start_end_dates(file=file)
    except OSError as e:
        raise FileParseError(file, str(e)) from e
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _get_TOA5_start_end_dates(file):

    encoding = FILE_CONFIGS['TOA5']['encoding']
    with open(file, 'rb') as f:

        # Iterate forward to find first valid start date
        start_date = None
        for line in f:
            try:
                start_date = _TOA5_date_read_formatter(line.decode(encoding))
                break
            except ValueError:
                continue

        # Iterate backwards to find last valid end date
        end_date = None
        pos = f.seek(0, os.SEEK_END)
        while start_date and pos > 0:
            pos -= 1
            f.seek(pos)
            if not f.read(1) == b'\n':
                continue
            try:
                end_date = _TOA5_date_read_formatter(
                    f.readline().decode(encoding)
                    )
                break
            except ValueError:
                continue

    return {'start_date': start_date, 'end_date': end_date}
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _TOA5_date_read_formatter(line):

    date_str = line.strip().split(FILE_CONFIGS['TOA5']['separator'])[0]
    date_str = date_str.replace('"', '')
    for fmt in TOA5_DATE_FORMATS:
        try:
            return pd.Timestamp(dt.datetime.strptime(date_str, fmt))
        except ValueError:
            continue
    raise ValueError(f'No valid date in line {line!r}')
#------------------------------------------------------------------------------



###############################################################################
### END DATE HANDLING FUNCTIONS ###
###############################################################################



###############################################################################
### BEGIN FILE READ FUNCTIONS ###
###############################################################################



#------------------------------------------------------------------------------
def get_data(
        file, file_type=None, usecols=None, extra_types=None,
        n_header_lines=None
        ):
    """
    Read the data from the file.

    Parameters
    ----------
    file : str or Pathlib.Path
        The file to parse.
    file_type : str, optional
        The type of file (must be either "TOA5" or "STR").
        The default is None (detect).
    usecols : list, optional
        The subset of columns to keep (names not in the file are ignored).
        The default is None (all columns retained).
    extra_types : dict, optional
        Additional type lists (see get_column_types). The default is None.
    n_header_lines : int, optional
        Number of lines preceding the data. The default is None (the number
        configured for the file type).

    Raises
    ------
    FileParseError
        Raised if the file content is malformed.

    Returns
    -------
    df : pd.core.frame.DataFrame
        Data, indexed by the parsed timestamps.

    """

    # If file type not supplied, detect it.
    if not file_type:
        file_type = get_file_type(file)
    _check_format(fmt=file_type)
    configs = FILE_CONFIGS[file_type]
    time_var = configs['time_variable']

    # The time column is always the first and is always read
    names = get_column_names(file=file, file_type=file_type)
    names[0] = time_var
    types = get_column_types(
        names=names, file_type=file_type, extra_types=extra_types
        )
    thecols = names
    if usecols is not None:
        thecols = [time_var] + [
            col for col in usecols if col in names and not col == time_var
            ]

    # Now import data
    try:
        df = pd.read_csv(
            file,
            skiprows=(
                configs['n_header_lines'] if n_header_lines is None
                else n_header_lines
                ),
            header=None,
            names=names,
            usecols=None if usecols is None else thecols,
            index_col=False,
            dtype={
                col: str for col in thecols if not types[col] == 'float'
                },
            na_values=configs['na_values'],
            sep=configs['separator'],
            encoding=configs['encoding'],
            engine='c',
            on_bad_lines='error',
            low_memory=False
            )
    except pd.errors.EmptyDataError:
        df = pd.DataFrame(columns=names)
    except (OSError, UnicodeDecodeError, ValueError, pd.errors.ParserError) as e:
        logging.error(f'Cannot load {file}')
        raise FileParseError(file, str(e)) from e

    return (
        df[thecols]
        .pipe(_set_time_index, file=file, file_type=file_type)
        .pipe(_integrity_checks, types=types)
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _set_time_index(df, file, file_type):
    """
    Parse the time column and set it as the index.

    Parameters
    ----------
    df : pd.core.frame.DataFrame
        Dataframe containing the data (time column first).
    file : str or Pathlib.Path
        The file the data came from (for error reporting).
    file_type : str
        The type of file.

    Returns
    -------
    df : pd.core.frame.DataFrame
        Dataframe with DatetimeIndex; the time column is dropped.

    """

    time_var = FILE_CONFIGS[file_type]['time_variable']
    if file_type == 'STR':
        try:
            secs = pd.to_numeric(df[time_var], errors='raise')
        except (ValueError, TypeError) as e:
            logging.error(f'Cannot load {file}')
            raise FileParseError(file, f'bad time value ({e})') from e
        if secs.isnull().any():
            logging.error(f'Cannot load {file}')
            raise FileParseError(file, 'missing time values')
        index = tf.convert_labview_seconds(secs)
    else:
        index = pd.DatetimeIndex(
            pd.to_datetime(df[time_var], format='ISO8601', errors='coerce')
            )
    df = df.drop(time_var, axis=1)
    df.index = index
    df.index.name = INDEX_NAME

    # If bad time data exists, dump the record
    bad_dates = pd.isnull(df.index)
    if bad_dates.any():
        logging.warning(
            f'Dropped {bad_dates.sum()} records with invalid timestamps '
            f'from {file}'
            )
        df = df[~bad_dates]
    return df
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _integrity_checks(df, types):
    """
    Coerce the columns to their types.

    Parameters
    ----------
    df : pd.core.frame.DataFrame
        Dataframe containing the data.
    types : dict
        Name: type mapping (see get_column_types).

    Returns
    -------
    df : pd.core.frame.DataFrame
        Dataframe containing the checked / altered data.

    """

    for col in df.columns:
        if types[col] == 'float':
            df[col] = pd.to_numeric(df[col], errors='coerce')
        elif types[col] == 'integer':
            df[col] = (
                pd.to_numeric(df[col], errors='coerce').astype('Int64')
                )
        elif types[col] == 'datetime':
            df[col] = pd.to_datetime(
                df[col], format='ISO8601', errors='coerce'
                )
    return df
#------------------------------------------------------------------------------



###############################################################################
### END FILE READ FUNCTIONS ###
###############################################################################



###############################################################################
### BEGIN FILE CHECKING FUNCTIONS ###
###############################################################################



#------------------------------------------------------------------------------
def get_file_type_configs(file_type=None, return_field=None):
    """
    Get the configuration dictionary for the file type.

    Parameters
    ----------
    file_type : str, optional
        The type of file (must be either "TOA5" or "STR").
        The default is None (return all configurations).
    return_field : str, optional
        Return only this field of the configuration. The default is None.

    Returns
    -------
    dict
        The type-specific configuration dictionary.

    """

    if not file_type:
        if not return_field is None:
            raise RuntimeError(
                'Cannot return individual field if file type not set!'
                )
        return FILE_CONFIGS
    _check_format(fmt=file_type)
    if return_field is None:
        return FILE_CONFIGS[file_type]
    return FILE_CONFIGS[file_type][return_field]
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _check_format(fmt):

    if not fmt in FILE_CONFIGS.keys():
        raise NotImplementedError(f'Format {fmt} is not implemented!')
#------------------------------------------------------------------------------

###############################################################################
### END FILE CHECKING FUNCTIONS ###
###############################################################################
