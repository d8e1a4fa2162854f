import pytest

from zdosfs import __version__
from zdosfs.main import main, parse_args, options_from_args

from conftest import HELLO, PROG, sample_builder


def test_list(image_path, capsys):
    assert main([image_path]) == 0
    assert capsys.readouterr().out.splitlines() == ['DIRECTORY', 'HELLO.S', 'PROG']


def test_list_single_file(image_path, capsys):
    assert main(['-f', 'HELLO.S', image_path]) == 0
    assert capsys.readouterr().out.splitlines() == ['HELLO.S']


def test_descriptor(image_path, capsys):
    assert main(['--descriptor', '--file', 'PROG', image_path]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == 'PROG'
    assert '  Record length: 256' in out
    assert '  Procedure start address: 0x4400' in out


def test_export_createdir(image_path, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(['-e', '-c', image_path]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[:2] == [f'Exporting files from: {image_path}',
                       'into directory: sample.img.dir']
    assert (tmp_path / 'sample.img.dir' / 'HELLO.S').read_bytes() == HELLO
    assert (tmp_path / 'sample.img.dir' / 'PROG').read_bytes() == PROG


def test_several_images(tmp_path, capsys):
    first = sample_builder().save(tmp_path / 'a.img')
    second = sample_builder(77).save(tmp_path / 'b.img')
    assert main(['-f', 'PROG', first, second]) == 0
    assert capsys.readouterr().out.splitlines() == ['PROG', 'PROG']


def test_invalid_image_stops_run(image_path, tmp_path, capsys):
    bad = tmp_path / 'bad.img'
    bad.write_bytes(b'ZDOS')
    assert main([str(bad), image_path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'Invalid file size' in captured.err


def test_missing_image(tmp_path, capsys):
    assert main([str(tmp_path / 'nothing.img')]) == 1
    assert "Can't open file" in capsys.readouterr().err


def test_diagnostics_do_not_fail(tmp_path, caplog):
    img = sample_builder()
    img.poke(3, 31, 130, 9)
    path = img.save(tmp_path / 'disk.img')
    assert main(['-a', '-b', path]) == 0
    assert 'Backward pointer' in caplog.text


def test_requires_image(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(['--version'])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_options_from_args():
    opts = options_from_args(parse_args(
        ['-a', '-b', '-c', '-d', '-e', '-i', '-v', '-f', 'X', 'disk.img']))
    assert opts.name == 'X'
    assert opts.analyze and opts.backptr and opts.createdir
    assert opts.descriptor and opts.export and opts.ignore and opts.verbose
    assert parse_args(['disk.img']).file is None
