'''Sample RINEX and Compact RINEX files, built line by line.'''

import pytest


def hdr(content, label):
    return content.ljust(60) + label


def fmt(scaled, decimals=3):
    sign = '-' if scaled < 0 else ''
    whole, frac = divmod(abs(scaled), 10 ** decimals)
    return '%s%d.%0*d' % (sign, whole, decimals, frac)


def field(value, lli=' ', ssi=' '):
    text = ' ' * 14 if value is None else fmt(value).rjust(14)
    return text + lli + ssi


def rinex2_header(codes):
    lines = [hdr('%9s%11s%-20s%-20s' % ('2.11', '', 'OBSERVATION DATA',
                                        'G (GPS)'), 'RINEX VERSION / TYPE'),
             hdr('teqc  2019Feb25     UNAVCO              20210101 00:00:00UTC',
                 'PGM / RUN BY / DATE'),
             hdr('TEST', 'MARKER NAME')]
    for k in range(0, len(codes), 9):
        count = '%6d' % len(codes) if not k else ' ' * 6
        lines.append(hdr(count + ''.join('%6s' % c for c in codes[k:k + 9]),
                         '# / TYPES OF OBSERV'))
    lines.append(hdr('', 'END OF HEADER'))
    return lines


def rinex3_header(codes):
    lines = [hdr('%9s%11s%-20s%-20s' % ('3.04', '', 'OBSERVATION DATA',
                                        'M (MIXED)'), 'RINEX VERSION / TYPE'),
             hdr('TEST', 'MARKER NAME')]
    for system, types in codes.items():
        lines.extend(sysline(system, types))
    lines.append(hdr('', 'END OF HEADER'))
    return lines


def sysline(system, types):
    lines = []
    for k in range(0, len(types), 13):
        head = '%-1s  %3d' % (system, len(types)) if not k else ' ' * 6
        lines.append(hdr(head + ''.join(' %3s' % c for c in types[k:k + 13]),
                         'SYS / # / OBS TYPES'))
    return lines


def epoch2(minute, sec, flag, sats, clock=None):
    line = ' 21  1  1  0%3d%11.7f  %1d%3d' % (minute, sec, flag, len(sats))
    line += ''.join(sats[:12])
    if clock is not None:
        line = line.ljust(68) + fmt(clock, 9).rjust(12)
    lines = [line]
    for k in range(12, len(sats), 12):
        lines.append(' ' * 32 + ''.join(sats[k:k + 12]))
    return lines


def epoch3(minute, flag, count, clock=None):
    line = '> 2021 01 01 00 %02d%11.7f  %1d%3d' % (minute, 0, flag, count)
    if clock is not None:
        line = line.ljust(41) + fmt(clock, 12).rjust(15)
    return line


CODES2 = ['C1', 'L1', 'L2', 'P2', 'S1', 'S2', 'D1']


def slots2(s, e):
    c1 = 20000000000 + s * 1000003 + e * 2345 + e * e * 17
    values = [c1,
              105000000000 + s * 7000001 + e * 12321 + e * e * 31,
              82000000000 + s * 5000011 + e * 9601,
              c1 + 4321,
              45000 + (s * 7 + e) % 9 * 250,
              38000 + e * 125,
              -(1500000 + s * 3331) + e * 77]
    if (s + e) % 5 == 0:
        values[2] = None
    if s == 7 and e == 2:
        values[5] = values[6] = None
    lli = '1' if e == 5 and s % 2 else ' '
    ssi = str(5 + (s + e) % 4)
    return [field(values[0]), field(values[1], lli, ssi),
            field(values[2], ' ', ssi if values[2] is not None else ' '),
            field(values[3]), field(values[4]), field(values[5]),
            field(values[6])]


def data2(s, e):
    fields = slots2(s, e)
    return [''.join(fields[:5]).rstrip(), ''.join(fields[5:]).rstrip()]


@pytest.fixture
def rinex2_lines():
    '''A RINEX 2.11 file: gaps, a new satellite, an event, 13 satellites.'''
    lines = rinex2_header(CODES2)
    plan = [(0, [1, 2, 3, 4, 5], None, 0),
            (1, [1, 2, 3, 4, 5], -99996669, 0),
            (2, [1, 2, 4, 5, 7], None, 0),
            (4, list(range(1, 14)), -99990007, 0),
            (5, list(range(1, 14)), None, 1)]
    for e, sats, clock, flag in plan:
        prns = ['G%02d' % s for s in sats]
        lines.extend(epoch2(e // 2, (e % 2) * 30.0, flag, prns, clock))
        for s in sats:
            lines.extend(data2(s, e))
        if e == 2:
            lines.append(' ' * 28 + '4  2')
            lines.append(hdr('RECEIVER RESTARTED', 'COMMENT'))
            lines.append(hdr('ANTENNA UNCHANGED', 'COMMENT'))
    return lines


CODES3 = {'G': ['C1C', 'L1C', 'D1C', 'S1C'], 'R': ['C1C', 'L1C']}


def data3(prn, e, codes):
    n = int(prn[1:])
    values = {'C1C': 21000000000 + n * 1000003 + e * 1777,
              'L1C': 110000000000 + n * 5000017 + e * 9337 + e * e * 3,
              'D1C': -(2000000 + n * 101) + e * 13,
              'S1C': 42000 + e * 250 + n}
    if prn == 'R02' and e == 4:
        values['L1C'] = None
    lli = '1' if prn == 'G01' and e == 3 else ' '
    fields = [field(values[c], lli if c == 'L1C' else ' ',
                    '6' if c == 'L1C' and values[c] is not None else ' ')
              for c in codes]
    return (prn + ''.join(fields)).rstrip()


@pytest.fixture
def rinex3_lines():
    '''A RINEX 3.04 file, with the GLONASS types redefined by an event.'''
    lines = rinex3_header(CODES3)
    codes = dict(CODES3)
    plan = [(0, ['G01', 'G02', 'R01'], None),
            (1, ['G01', 'G02', 'R01', 'R02'], 123456789012),
            (3, ['G01', 'G02', 'R01', 'R02'], None),
            (4, ['G02', 'R02'], 123456789999)]
    for e, prns, clock in plan:
        if e == 3:
            lines.append(epoch3(2, 4, 2))
            lines.append(hdr('GLONASS SIGNAL STRENGTH ADDED', 'COMMENT'))
            codes['R'] = ['C1C', 'L1C', 'S1C']
            lines.extend(sysline('R', codes['R']))
        lines.append(epoch3(e, 0, len(prns), clock))
        for prn in prns:
            lines.append(data3(prn, e, codes[prn[0]]))
    return lines


@pytest.fixture
def compact2_lines():
    '''A small Compact RINEX 1.0 file, written by hand.'''
    return [
        hdr('%-20s%-20s' % ('1.0', 'COMPACT RINEX FORMAT'),
            'CRINEX VERS   / TYPE'),
        hdr('%-40s%-20s' % ('RNX2CRX ver.4.0.7', '28-Dec-21 00:00'),
            'CRINEX PROG / DATE'),
    ] + rinex2_header(['C1', 'L1']) + [
        '&21  1  1  0  0  0.0000000  0  2G01G02',
        '',
        '3&23619095450 3&124123141425    7',
        '3&20000000000',
        '                3',
        '',
        '100 525',
        '10',
        '&' + ' ' * 27 + '4  2',
        hdr('THIS IS A COMMENT', 'COMMENT'),
        hdr('SECOND COMMENT', 'COMMENT'),
        '&21  1  1  0  1  0.0000000  0  2G01G02',
        '',
        '3&23619095650 3&124123142475    7',
        '3&20000000020 3&105000000000',
    ]


@pytest.fixture
def plain2_lines():
    '''What compact2_lines decompresses to.'''
    return rinex2_header(['C1', 'L1']) + [
        ' 21  1  1  0  0  0.0000000  0  2G01G02',
        '  23619095.450   124123141.425 7',
        '  20000000.000',
        ' 21  1  1  0  0 30.0000000  0  2G01G02',
        '  23619095.550   124123141.950 7',
        '  20000000.010',
        ' ' * 28 + '4  2',
        hdr('THIS IS A COMMENT', 'COMMENT'),
        hdr('SECOND COMMENT', 'COMMENT'),
        ' 21  1  1  0  1  0.0000000  0  2G01G02',
        '  23619095.650   124123142.475 7',
        '  20000000.020   105000000.000',
    ]
