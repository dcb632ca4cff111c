from histogram_filter import BeliefFilter


class Metrics:
    """Class to compute and store metrics for localization runs.

    Records, for every step, how much belief the filter put on the true cell
    and how far its most likely cell is from the truth.

    Attributes:
        width, height: grid dimensions used for toroidal distances
        records: list of dicts: {'probability', 'estimate', 'truth', 'error'}
    """
    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.records = []

    def record(self, belief: BeliefFilter, true_position):
        """Store the metrics of one step and return its record."""
        estimate = belief.most_likely_position()
        entry = {
            'probability': belief.probability_at(*true_position),
            'estimate': estimate,
            'truth': tuple(true_position),
            'error': self._toroidal_distance(estimate, true_position),
        }
        self.records.append(entry)
        return entry

    def score(self):
        """Mean probability assigned to the true cell over all recorded steps."""
        if not self.records:
            return 0.0
        return sum(r['probability'] for r in self.records) / float(len(self.records))

    def mean_error(self):
        if not self.records:
            return 0.0
        return sum(r['error'] for r in self.records) / float(len(self.records))

    def hit_rate(self):
        """Fraction of steps where the most likely cell is the true cell."""
        if not self.records:
            return 0.0
        return sum(1 for r in self.records if r['error'] == 0) / float(len(self.records))

    def _toroidal_distance(self, a, b):
        """Manhattan distance between two cells, going around the edges when shorter."""
        dx = abs(a[0] - b[0]) % self.width
        dy = abs(a[1] - b[1]) % self.height
        return min(dx, self.width - dx) + min(dy, self.height - dy)
