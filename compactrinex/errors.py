'''
Exceptions raised while converting between RINEX and Compact RINEX.

Every error knows where it happened: the epoch index (counted from 1 over
all epoch descriptors in the stream, special events included), and when
relevant the satellite and observable being processed.
Nothing is retried or guessed; the caller decides whether to abort.
'''


class HatanakaError(ValueError):
    '''Base class for all conversion errors.'''
    def __init__(self, message, epoch=None, satellite=None, observable=None):
        ValueError.__init__(self, message)
        self.message = message
        self.epoch = epoch
        self.satellite = satellite
        self.observable = observable

    def locate(self, epoch=None, satellite=None, observable=None):
        '''Fill in location fields which are not yet known; return self.'''
        if self.epoch is None:
            self.epoch = epoch
        if self.satellite is None:
            self.satellite = satellite
        if self.observable is None:
            self.observable = observable
        return self

    def __str__(self):
        where = []
        if self.epoch is not None:
            where.append('epoch %d' % self.epoch)
        if self.satellite is not None:
            where.append('satellite ' + self.satellite)
        if self.observable is not None:
            where.append('observable ' + self.observable)
        if where:
            return '%s (%s)' % (self.message, ', '.join(where))
        return self.message


class RinexFormatError(HatanakaError):
    '''A line does not match its expected role, width, or structure.'''


class DecodeStateError(HatanakaError):
    '''A difference was received for a series with no valid prior state.'''


class DifferenceOverflowError(HatanakaError, OverflowError):
    '''A scaled integer left the signed 64-bit range.'''


class UnsupportedEventError(HatanakaError):
    '''An epoch flag, or special event block, this program can't handle.'''
