'''
Character differences of text lines, as used in Compact RINEX for epoch
lines and for LLI / signal strength flags.

Against the previous line of the same role, a space means `no change',
`&' means `changed to a space', and any other character replaces the
old one.  Unchanged trailing content is simply left off.
'''

from .errors import RinexFormatError


def choose(old, new):
    '''Apply one diff character to the old character.'''
    if new == ' ':
        return old
    if new == '&':
        return ' '
    return new


class TextLineDiffCodec(object):
    '''
    Diff a series of text lines against the last reconstructed line.

    `width', if given, is the fixed width all reconstructed lines are padded
    or truncated to.
    '''
    def __init__(self, width=None):
        self.width = width

    def fit(self, line):
        if self.width is None:
            return line
        return line[:self.width].ljust(self.width)

    def encode(self, current, previous=None):
        '''Return the compact form of current.

        Without a previous line, current itself is the (reference) output.
        '''
        if '&' in current:
            raise RinexFormatError('Cannot represent `&\' in ' + repr(current))
        current = self.fit(current)
        if previous is None:
            return current
        size = max(len(current), len(previous))
        current = current.ljust(size)
        previous = previous.ljust(size)
        diff = []
        for old, new in zip(previous, current):
            if old == new:
                diff.append(' ')
            elif new == ' ':
                diff.append('&')
            else:
                diff.append(new)
        return ''.join(diff).rstrip()

    def decode(self, diff, previous=None, reference=False):
        '''Rebuild a line from its compact form.

        A reference line is taken verbatim (`&' still meaning space).
        Otherwise previous is required; a diff with nothing to apply it to
        is a format error, not something to guess at.
        '''
        if reference:
            return self.fit(diff.replace('&', ' '))
        if previous is None:
            raise RinexFormatError('Difference line with no reference line: '
                                   + repr(diff))
        line = previous.ljust(len(diff))
        line = ''.join(map(choose, line[:len(diff)], diff)) + line[len(diff):]
        return self.fit(line)
