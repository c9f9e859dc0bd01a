import os
import pathlib
import re

import pytest

import dir_functions as dirf


@pytest.fixture
def tree(tmp_path):
    for rel in ['f1.txt', 'sub1/f2.txt', 'sub1/deep/f3.txt', 'sub2/f4.dat']:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('x')
    return tmp_path


def test_depth_one_lists_root_children_only(tree):
    files, dirs = dirf.get_directory_listing(tree, max_depth=1)
    assert files == [tree / 'f1.txt']
    assert dirs == [tree / 'sub1', tree / 'sub2']


def test_depth_two_and_unbounded(tree):
    files, dirs = dirf.get_directory_listing(tree, max_depth=2)
    assert files == [tree / 'f1.txt', tree / 'sub1' / 'f2.txt',
                     tree / 'sub2' / 'f4.dat']
    assert dirs == [tree / 'sub1', tree / 'sub2', tree / 'sub1' / 'deep']
    files, dirs = dirf.get_directory_listing(tree)
    assert tree / 'sub1' / 'deep' / 'f3.txt' in files
    assert len(files) == 4


@pytest.mark.parametrize('depth', [1, 2])
def test_file_listing_grows_with_depth(tree, depth):
    shallow = dirf.get_directory_listing(tree, max_depth=depth)[0]
    deeper = dirf.get_directory_listing(tree, max_depth=depth + 1)[0]
    assert set(shallow) < set(deeper)


def test_name_filter_is_subset_and_leaves_dirs(tree):
    all_files, all_dirs = dirf.get_directory_listing(tree)
    files, dirs = dirf.get_directory_listing(tree, name_filter=r'\.dat$')
    assert files == [f for f in all_files if re.search(r'\.dat$', str(f))]
    assert files == [tree / 'sub2' / 'f4.dat']
    assert dirs == all_dirs


def test_compiled_and_empty_filters(tree):
    files = dirf.get_directory_listing(
        tree, name_filter=re.compile(r'f[12]\.txt$'))[0]
    assert files == [tree / 'f1.txt', tree / 'sub1' / 'f2.txt']
    assert (
        dirf.get_directory_listing(tree, name_filter='')[0] ==
        dirf.get_directory_listing(tree)[0]
        )


def test_empty_directory(tmp_path):
    assert dirf.get_directory_listing(tmp_path) == ([], [])


def test_nested_roots_list_files_twice(tree):
    files = dirf.get_directory_listing(
        [str(tree), str(tree / 'sub1')], max_depth=2
        )[0]
    assert files.count(tree / 'sub1' / 'f2.txt') == 2


def test_depth_is_global_across_roots(tree):
    files = dirf.get_directory_listing(
        [tree / 'sub1', tree / 'sub2'], max_depth=1
        )[0]
    assert files == [tree / 'sub1' / 'f2.txt', tree / 'sub2' / 'f4.dat']


def test_unreadable_directory_is_skipped(tmp_path, monkeypatch, caplog):
    for sub in ['a', 'b', 'c']:
        (tmp_path / sub).mkdir()
        (tmp_path / sub / f'{sub}.txt').write_text('x')
    bad_dir = tmp_path / 'b'
    real_iterdir = pathlib.Path.iterdir

    def iterdir(self):
        if self == bad_dir:
            raise PermissionError('access denied')
        return real_iterdir(self)

    monkeypatch.setattr(pathlib.Path, 'iterdir', iterdir)
    files, dirs, errors = dirf.get_directory_listing(
        tmp_path, return_errors=True
        )
    assert files == [tmp_path / 'a' / 'a.txt', tmp_path / 'c' / 'c.txt']
    assert len(dirs) == 3
    assert len(errors) == 1
    assert errors[0][0] == bad_dir
    assert isinstance(errors[0][1], PermissionError)
    assert 'Failed reading directory' in caplog.text


def test_list_directory_returns_error_pair(tmp_path):
    children, error = dirf.list_directory(tmp_path / 'missing')
    assert children == []
    assert isinstance(error, OSError)


@pytest.mark.skipif(not hasattr(os, 'symlink'), reason='no symlinks')
def test_broken_link_is_neither_file_nor_dir(tmp_path):
    (tmp_path / 'real.txt').write_text('x')
    os.symlink(tmp_path / 'nowhere', tmp_path / 'broken')
    assert dirf.get_path_type(tmp_path / 'broken') is None
    files, dirs = dirf.get_directory_listing(tmp_path)
    assert files == [tmp_path / 'real.txt']
    assert dirs == []


def test_levels_are_yielded_in_order(tree):
    levels = list(dirf.iter_directory_levels(tree))
    assert [level['level'] for level in levels] == [1, 2, 3]
    assert levels[2]['files'] == [tree / 'sub1' / 'deep' / 'f3.txt']
    assert levels[2]['dirs'] == []


def test_invalid_depth(tree):
    with pytest.raises(ValueError):
        dirf.get_directory_listing(tree, max_depth=0)


@pytest.mark.skipif(not hasattr(os, 'symlink'), reason='no symlinks')
def test_link_cycle_is_bounded_by_depth(tmp_path):
    (tmp_path / 'f.txt').write_text('x')
    os.symlink(tmp_path, tmp_path / 'loop')
    files = dirf.get_directory_listing(tmp_path, max_depth=3)[0]
    assert files == [
        tmp_path / 'f.txt', tmp_path / 'loop' / 'f.txt',
        tmp_path / 'loop' / 'loop' / 'f.txt'
        ]
