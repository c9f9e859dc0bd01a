# -*- coding: utf-8 -*-
"""
Helpers writing synthetic STR and TOA5 files for the tests.
"""

import datetime as dt

import pytest

LABVIEW_EPOCH = dt.datetime(1904, 1, 1)


def labview_seconds(date):

    return (date - LABVIEW_EPOCH).total_seconds()


def write_str(path, names, rows):
    """Write an STR file; rows are (datetime, [values]) tuples."""

    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ['   1 SPEC: ' + ', '.join(names)]
    for date, values in rows:
        fields = [f'{labview_seconds(date):.3f}'] + [str(x) for x in values]
        lines.append(' ' + ' '.join(fields) + ' ')
    path.write_text('\n'.join(lines) + '\n')
    return path


def write_toa5(path, names, rows, units=None, sampling=None, table='Met'):
    """Write a TOA5 file; names exclude TIMESTAMP and RECORD."""

    path.parent.mkdir(parents=True, exist_ok=True)
    all_names = ['TIMESTAMP', 'RECORD'] + list(names)
    units = ['TS', 'RN'] + (units if units else ['' for x in names])
    sampling = ['', ''] + (sampling if sampling else ['Smp' for x in names])
    quote = lambda items: ','.join(f'"{x}"' for x in items)
    lines = [
        quote(['TOA5', 'TestStation', 'CR3000', '1234', 'CR3000.Std.32',
               'CPU:test.CR3', '5678', table]),
        quote(all_names),
        quote(units),
        quote(sampling)
        ]
    for i, (date, values) in enumerate(rows):
        fields = (
            [f'"{date:%Y-%m-%d %H:%M:%S}"', str(i)] + [str(x) for x in values]
            )
        lines.append(','.join(fields))
    path.write_text('\n'.join(lines) + '\n')
    return path


def ten_minute_rows(start, n, first_value=0):

    return [
        (start + dt.timedelta(minutes=10 * i), [float(first_value + i)])
        for i in range(n)
        ]


@pytest.fixture
def str_dir(tmp_path):
    """Three STR files named out of time order, six 10-min rows each."""

    day = dt.datetime(2014, 1, 13)
    for hour, sub in zip([10, 9, 11], ['a', 'b', 'c']):
        start = day.replace(hour=hour)
        write_str(
            tmp_path / sub / f'A_140113_{hour:02d}0000.str',
            names=['X1'],
            rows=ten_minute_rows(start=start, n=6, first_value=hour * 100)
            )
    return tmp_path


@pytest.fixture
def toa5_dir(tmp_path):
    """Three TOA5 files with disjoint spans, names out of time order."""

    spans = {
        'Site_Met_a.dat': dt.datetime(2014, 12, 19),
        'Site_Met_b.dat': dt.datetime(2014, 12, 18),
        'Site_Met_c.dat': dt.datetime(2014, 12, 20),
        }
    for name, start in spans.items():
        rows = [
            (start + dt.timedelta(hours=6 * i), [float(i), 50.0])
            for i in range(4)
            ]
        write_toa5(tmp_path / name, names=['AirT', 'RH'], rows=rows,
                   units=['degC', '%'], sampling=['Avg', 'Smp'])
    write_toa5(
        tmp_path / 'Other_Soil.dat', names=['Tsoil'],
        rows=[(dt.datetime(2014, 12, 18), [5.0])]
        )
    return tmp_path
