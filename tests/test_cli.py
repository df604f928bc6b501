from datetime import datetime

import pytest

from compactrinex.cli import crx2rnx_main, rnx2crx_main, stamp


def write(p, lines):
    p.write_text('\n'.join(lines) + '\n')


def test_version(capsys):
    assert crx2rnx_main(['-v']) == 0
    assert 'compactrinex version 1.0.0' in capsys.readouterr().out


def test_filename_required():
    with pytest.raises(SystemExit):
        rnx2crx_main([])


def test_bad_order(tmp_path):
    with pytest.raises(SystemExit):
        rnx2crx_main([str(tmp_path / 'x.21o'), '--order', '12'])


def test_stamp():
    assert stamp(None, None) is None
    assert stamp('2021-12-28', None) == datetime(2021, 12, 28)
    assert stamp('2021-12-28', '13:05:09') == datetime(2021, 12, 28, 13, 5, 9)
    with pytest.raises(ValueError):
        stamp('28/12/2021', None)


def test_round_trip(tmp_path, rinex3_lines):
    src = tmp_path / 'site00usa_r_20210010000_01d_30s_mo.rnx'
    write(src, rinex3_lines)
    compact = tmp_path / 'site.crx'
    back = tmp_path / 'site.rnx'
    assert rnx2crx_main([str(src), '-o', str(compact),
                         '-d', '2021-12-28', '-t', '13:05:00']) == 0
    assert '28-Dec-21 13:05' in compact.read_text().splitlines()[1]
    assert crx2rnx_main([str(compact), '-o', str(back)]) == 0
    assert back.read_text() == src.read_text()


def test_failure_status(tmp_path, rinex3_lines):
    src = tmp_path / 'site.rnx'
    write(src, rinex3_lines)
    out = tmp_path / 'out.rnx'
    assert crx2rnx_main([str(src), '-o', str(out)]) == 1
    assert not out.exists()


def test_undecodable_input(tmp_path, rinex3_lines):
    src = tmp_path / 'site.rnx'
    data = ('\n'.join(rinex3_lines) + '\n').encode('ascii')
    src.write_bytes(data.replace(b'MARKER NAME', b'MARKER\xff NAME'))
    out = tmp_path / 'site.crx'
    assert rnx2crx_main([str(src), '-o', str(out)]) == 1
    assert not out.exists()
