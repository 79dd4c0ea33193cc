# polis/testing.py
"""Helpers shared by the test modules."""


class FixedRandom:
    """Random source whose rolls always come back the same.

    ``roll`` is returned by random(); uniform(a, b) lands at ``spread`` of the
    way between a and b; choice() always takes the first item.
    """

    def __init__(self, roll=0.0, spread=0.5):
        self.roll = roll
        self.spread = spread

    def random(self):
        return self.roll

    def uniform(self, a, b):
        return a + (b - a) * self.spread

    def choice(self, seq):
        return seq[0]

    def randrange(self, stop):
        return 0


def set_resources(resources, **values):
    resources.update(values)
    return resources
