'''
compactrinex Package: Compact RINEX (Hatanaka) compression of GNSS observations

The main things provided are HatanakaCompressor and HatanakaDecompressor,
which turn a RINEX observation file (as any iterable of lines) into its
Compact RINEX form and back, exactly.  rnx2crx() and crx2rnx() do the same
for files on disk, and are also installed as command line programs.

Numeric observations are sent as exact integer differences of order 3
(diffcodec), epoch lines and LLI / signal strength flags as character
differences against the previous line (textdiff).  The state connecting one
epoch to the next lives in an EpochStateTracker (tracker), and the column
layout of the RINEX side in an ObservationLayout (layout), which is normally
built from the file header (header).

RINEX 2.xx files go with Compact RINEX 1.0, RINEX 3.xx and 4.xx with 3.0.

'''

__ver__ = '1.0.0'

from .errors import (HatanakaError, RinexFormatError, DecodeStateError,
                     DifferenceOverflowError, UnsupportedEventError)
from .diffcodec import DifferenceState, NumericDifferenceCodec
from .textdiff import TextLineDiffCodec
from .layout import (ObservationLayout, EpochDescriptor, FieldSlot, FieldSpec,
                     RESCALE_STEP)
from .tracker import EpochStateTracker
from .crx import (HatanakaCompressor, HatanakaDecompressor, compress,
                  decompress, crx2rnx, rnx2crx)
