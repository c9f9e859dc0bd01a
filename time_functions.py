# -*- coding: utf-8 -*-
"""
Created on Tue Nov  5 14:02:11 2024

Time handling for the instrument files: filename timestamps of TDLWintel STR
files, conversion of the 1904-epoch seconds written in the STR time column,
and coercion of caller-supplied window bounds.
"""

import datetime as dt
import pathlib
import re

import numpy as np
import pandas as pd

#------------------------------------------------------------------------------
### CONSTANTS ###
#------------------------------------------------------------------------------

STR_FILE_TIME_REGEX = re.compile(r'(\d{6}_\d{6})\.str$')
STR_FILE_TIME_FORMAT = '%y%m%d_%H%M%S'
LABVIEW_EPOCH = pd.Timestamp('1904-01-01 00:00:00')

#------------------------------------------------------------------------------
### FUNCTIONS ###
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_str_file_time(file):
    """
    Get the timestamp embedded in an STR file name
    (e.g. "140113_135354.str" -> 2014-01-13 13:53:54).

    Parameters
    ----------
    file : str or pathlib.Path
        The STR file.

    Raises
    ------
    ValueError
        Raised if the file name has no YYMMDD_HHMMSS timestamp.

    Returns
    -------
    pd.Timestamp
        The file timestamp.

    """

    name = pathlib.Path(file).name
    match = STR_FILE_TIME_REGEX.search(name)
    if not match:
        raise ValueError(f'No YYMMDD_HHMMSS timestamp in file name {name}!')
    return pd.Timestamp(
        dt.datetime.strptime(match.group(1), STR_FILE_TIME_FORMAT)
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def convert_labview_seconds(values):
    """
    Convert seconds since 1904-01-01 (the TDLWintel time column) to
    timestamps, truncating to whole milliseconds.

    Parameters
    ----------
    values : array-like
        Seconds since the epoch.

    Returns
    -------
    pd.DatetimeIndex
        The timestamps.

    """

    secs = np.floor(np.asarray(values, dtype=float))
    millisecs = np.floor(
        1000 * (np.asarray(values, dtype=float) - secs)
        )
    return pd.DatetimeIndex(
        LABVIEW_EPOCH +
        pd.to_timedelta(secs, unit='s') +
        pd.to_timedelta(millisecs, unit='ms')
        )
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def coerce_date(date):
    """
    Coerce a window bound to a pandas timestamp.

    Parameters
    ----------
    date : None, str, datetime or pd.Timestamp
        The date.

    Raises
    ------
    TypeError
        Raised if the date cannot be interpreted.

    Returns
    -------
    pd.Timestamp or None
        The coerced date (None if None passed).

    """

    if date is None:
        return None
    try:
        timestamp = pd.Timestamp(date)
    except ValueError as e:
        raise TypeError(f'Cannot interpret {date!r} as a date!') from e
    if pd.isnull(timestamp):
        raise TypeError(f'Cannot interpret {date!r} as a date!')
    return timestamp
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def check_window(mindate, maxdate):
    """
    Coerce and check the window bounds.

    Parameters
    ----------
    mindate : None, str, datetime or pd.Timestamp
        Lower bound.
    maxdate : None, str, datetime or pd.Timestamp
        Upper bound.

    Raises
    ------
    ValueError
        Raised if both bounds are set and mindate is later than maxdate.

    Returns
    -------
    tuple
        (mindate, maxdate) as pd.Timestamp or None.

    """

    mindate, maxdate = coerce_date(mindate), coerce_date(maxdate)
    if mindate is not None and maxdate is not None and mindate > maxdate:
        raise ValueError('mindate must not be later than maxdate!')
    return mindate, maxdate
#------------------------------------------------------------------------------
