import datetime as dt

import pandas as pd
import pytest

import time_functions as tf


def test_str_file_time_from_name():
    assert (
        tf.get_str_file_time('/data/A_140113_135354.str') ==
        pd.Timestamp('2014-01-13 13:53:54')
        )


def test_str_file_time_bad_name():
    with pytest.raises(ValueError):
        tf.get_str_file_time('/data/140113.str')


def test_labview_seconds_truncate_to_milliseconds():
    index = tf.convert_labview_seconds([0.0, 1.5, 86400.25])
    assert list(index) == [
        pd.Timestamp('1904-01-01 00:00:00'),
        pd.Timestamp('1904-01-01 00:00:01.500'),
        pd.Timestamp('1904-01-02 00:00:00.250'),
        ]


def test_coerce_date():
    assert tf.coerce_date(None) is None
    assert tf.coerce_date('2014-01-13 09:30') == pd.Timestamp(2014, 1, 13, 9, 30)
    assert (
        tf.coerce_date(dt.datetime(2014, 1, 13)) == pd.Timestamp(2014, 1, 13)
        )
    with pytest.raises(TypeError):
        tf.coerce_date('not a date')


def test_check_window_order():
    assert tf.check_window(None, '2014-01-13') == (
        None, pd.Timestamp('2014-01-13')
        )
    with pytest.raises(ValueError):
        tf.check_window('2014-01-14', '2014-01-13')
