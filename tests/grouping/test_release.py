"""Tests for release grouping and rendering."""

import unittest
from unittest.mock import patch

from vc_release_notes.grouping.commit_parser import Category, Commit, CommitClassifier
from vc_release_notes.grouping.release import Release, group_commits


def commit(n: int, message: str) -> Commit:
    summary, _, body = message.partition("\n")
    return Commit(sha=f"{n:040x}", summary=summary, body=body.strip("\n"))


class TestGroupCommits(unittest.TestCase):
    def setUp(self) -> None:
        self.classifier = CommitClassifier()

    def test_no_commits(self):
        self.assertEqual(group_commits([], self.classifier), {})
        self.assertEqual(Release([]).groups(), {})

    def test_one_commit(self):
        c = commit(1, "feat(repo): the title\n\nThe body.\n\nThe footer. Ref #123")
        groups = Release([c], self.classifier).groups()
        self.assertEqual(groups, {Category.FEATURE: [c]})

    def test_multiple_verbs_keep_input_order(self):
        c1 = commit(1, "feat(repo): one")
        c2 = commit(2, "fix(repo): two")
        c3 = commit(3, "feat(repo): three")
        groups = group_commits([c1, c2, c3], self.classifier)
        self.assertEqual(groups, {Category.FEATURE: [c1, c3], Category.FIX: [c2]})

    def test_keys_follow_category_order(self):
        commits = [
            commit(1, "misc thing"),
            commit(2, "docs: readme"),
            commit(3, "fix: bug"),
            commit(4, "feat: new"),
            commit(5, "ci: pipeline"),
        ]
        groups = group_commits(commits, self.classifier)
        self.assertEqual(
            list(groups),
            [Category.FEATURE, Category.FIX, Category.CI, Category.DOCUMENTATION, Category.MISC],
        )

    def test_groups_partition_the_input(self):
        messages = [
            "feat: a", "fix: b", "ref: c", "chore: d", "improve: e", "style: f",
            "ci: g", "doc: h", "whatever i", "(x): j", "feat(k): k", "",
        ]
        commits = [commit(n, m) for n, m in enumerate(messages)]
        groups = group_commits(commits, self.classifier)
        flattened = [c for group in groups.values() for c in group]
        self.assertEqual(len(flattened), len(commits))
        self.assertEqual(sorted(c.sha for c in flattened), sorted(c.sha for c in commits))
        self.assertTrue(all(groups.values()))

    def test_accepts_generator(self):
        release = Release(commit(n, "feat: x") for n in range(3))
        self.assertEqual(len(release.commits), 3)
        self.assertEqual(len(release.groups()[Category.FEATURE]), 3)


class TestRender(unittest.TestCase):
    def test_empty_release(self):
        self.assertEqual(Release([]).render(), "")

    def test_single_feature_with_reference(self):
        c = commit(1, "feat(repo): the title\n\nThe body.\n\nThe footer. Ref #123")
        self.assertEqual(str(Release([c])), "### Feature\n\n- **repo:** The title (ref #123)")

    def test_one_group_one_commit(self):
        release = Release([commit(1, "Feat(testing): this is a test")])
        self.assertEqual(release.render(), "### Feature\n\n- **testing:** This is a test")

    def test_one_group_multi_commit(self):
        release = Release([
            commit(1, "Feat(testing): this is a test"),
            commit(2, "Feat(repo): this is another change"),
        ])
        want = "### Feature\n\n- **testing:** This is a test\n- **repo:** This is another change"
        self.assertEqual(release.render(), want)

    def test_multi_group(self):
        release = Release([
            commit(1, "Fix(repo): this is a fix"),
            commit(2, "Feat(testing): this is a test"),
            commit(3, "Feat(repo,server): repo and server"),
            commit(4, "improve: speed"),
        ])
        want = "\n\n".join([
            "### Feature\n\n- **testing:** This is a test\n- **repo, server:** Repo and server",
            "### Fix\n\n- **repo:** This is a fix",
            "### Enhancements\n\n- Speed",
        ])
        self.assertEqual(release.render(), want)

    def test_each_commit_is_classified_once(self):
        classifier = CommitClassifier()
        commits = [commit(1, "fix: a"), commit(2, "feat(x): b ref #7"), commit(3, "docs: c")]
        release = Release(commits, classifier)
        with patch.object(classifier, "classify", wraps=classifier.classify) as classify:
            rendered = release.render()
        self.assertEqual(classify.call_count, 3)
        self.assertEqual(
            rendered,
            "### Feature\n\n- **x:** B (ref #7)\n\n### Fix\n\n- A\n\n### Documentation\n\n- C",
        )

    def test_classified_keeps_input_order(self):
        commits = [commit(1, "fix: a"), commit(2, "feat: b")]
        entries = Release(commits).classified()
        self.assertEqual([entry.commit for entry in entries], commits)
        self.assertEqual([entry.category for entry in entries], [Category.FIX, Category.FEATURE])


if __name__ == "__main__":
    unittest.main()
