import unittest

from career_canvas.db import InMemoryDbClient
from scripts.seed_sample_data import SAMPLE_MENTORS, seed
from shared.documents import Mentorship, Story, User, UserProfile


class SeedSampleDataTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_seed_creates_mentors_and_mentee(self):
        counts = seed(self.db)

        self.assertEqual(counts["profiles"], len(SAMPLE_MENTORS))
        self.assertEqual(self.db.count(User), len(SAMPLE_MENTORS) + 1)
        mentors = [
            profile
            for profile in self.db.find(UserProfile)
            if profile.mentorship_preferences.is_available_as_mentor
        ]
        self.assertEqual(len(mentors), len(SAMPLE_MENTORS))
        self.assertEqual(self.db.count(Mentorship), 1)

    def test_seed_twice_reuses_people(self):
        seed(self.db)
        counts = seed(self.db)

        self.assertEqual(counts["users"], 0)
        self.assertEqual(counts["profiles"], 0)
        self.assertEqual(self.db.count(User), len(SAMPLE_MENTORS) + 1)
        self.assertEqual(self.db.count(UserProfile), len(SAMPLE_MENTORS))
        # Content is added again on every run.
        self.assertEqual(counts["stories"], 1)
        self.assertEqual(self.db.count(Story), 2)


if __name__ == "__main__":
    unittest.main()
