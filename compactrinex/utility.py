'''Small helpers for reading RINEX text: a line source and a header dictionary.

These are not very specific in usage, however, and could be useful anywhere.

'''
import os
from contextlib import suppress

# RINEX text is ASCII; read and write it as UTF-8 whatever the locale.
ENCODING = 'utf-8'


class metadict(dict):
    '''A dictionary for RINEX header values.
    Add a `numblocks' property (for the number of header blocks seen: the
    file header plus any redefined in special events)
    and field access for meta['name'] by meta.name.
    '''
    def __init__(self, *args, **kwargs):
        self.numblocks = 0
        dict.__init__(self, *args, **kwargs)

    def __getattr__(self, name):
        if name not in self:
            raise AttributeError(name)
        return self[name]


class fileread(object):
    '''
    Wrap "sufficiently file-like objects" (ie those with readline())
    in an iterable which counts line numbers, strips newlines, and raises
    StopIteration at EOF.
    '''
    def __new__(cls, file):
        '''Create a fileread object.

        Input can be filename string, file descriptor number, or any object
        with `readline'.
        '''
        if isinstance(file, fileread):
            file.reset()
            return file
        fr = object.__new__(cls)
        fr.owned = False
        if isinstance(file, (str, os.PathLike)):
            fr.fid = open(file, encoding=ENCODING, newline='')
            fr.name = os.fspath(file)
            fr.owned = True
        elif isinstance(file, int):
            fr.fid = os.fdopen(file, encoding=ENCODING, newline='')
            fr.name = "FD: " + str(file)
            fr.owned = True
        elif hasattr(file, 'readline'):
            fr.fid = file
            fr.name = getattr(file, 'name', None)
        else:
            raise ValueError("Input of type " + str(type(file)) +
                             " is not supported.")
        fr.reset()
        return fr

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __next__(self):
        '''Return the next line, also incrementing `lineno'.'''
        line = self.fid.readline()
        if not line:
            raise StopIteration()
        self.lineno += 1
        return line.rstrip('\r\n')

    def __iter__(self):
        return self

    def reset(self):
        '''Go back to the beginning if possible. Set lineno to 0 regardless.'''
        if hasattr(self.fid, 'seek'):
            with suppress(OSError, ValueError):
                self.fid.seek(0)
        self.lineno = 0

    def close(self):
        '''Close the file, if we opened it.'''
        if self.owned:
            with suppress(OSError):
                self.fid.close()
