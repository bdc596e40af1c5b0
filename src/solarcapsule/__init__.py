"""Solar Capsule.

Location- and time-tagged messages discoverable by people who share the same
solar time, with replies revealed to their author in daily batches.
"""

__version__ = "1.0.0"
__author__ = "Solar Capsule Project"
