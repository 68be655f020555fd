"""
Unit tests for the repository.

Tests commits, branches, history, revert, squash, forks and export/import.
"""

import json

import pytest

from chronicle.config import RepositoryConfig
from chronicle.version_control import (
    BranchAlreadyExistsError,
    BranchInfo,
    BranchOrCommitNotFoundError,
    CommitNotFoundError,
    CounterIdGenerator,
    DuplicateCommitIdError,
    ImportFormatError,
    InvalidSnapshotError,
    NotEnoughCommitsError,
    Repository,
    compute_diff,
)

TIMESTAMP = "2024-01-01T00:00:00+00:00"


def make_repo(initial_data=None, **kwargs) -> Repository:
    """Repository with deterministic ids and a fixed clock."""
    kwargs.setdefault("id_generator", CounterIdGenerator())
    kwargs.setdefault("clock", lambda: TIMESTAMP)
    return Repository(initial_data, **kwargs)


class TestRepositoryBasics:
    """Tests for commits and reading data back."""

    def test_empty_repository(self) -> None:
        """Test a repository created without data."""
        repo = make_repo()

        assert repo.head is None
        assert repo.current_branch == "main"
        assert repo.branches == {"main": None}
        assert repo.get_data() is None
        assert repo.log() == []

    def test_initial_commit(self) -> None:
        """Test that initial data is committed."""
        repo = make_repo({"a": 1})

        assert repo.head == "c1"
        assert repo.commits["c1"].message == "Initial commit"
        assert repo.commits["c1"].parent_id is None
        assert repo.commits["c1"].timestamp == TIMESTAMP

    def test_commit_and_log(self) -> None:
        """Test committing and reading history."""
        repo = make_repo({"a": 1})
        commit_id = repo.commit({"a": 2}, "update")

        assert commit_id == "c2"
        assert len(repo.log(10)) == 2
        assert repo.get_data() == {"a": 2}
        assert [entry.commit_id for entry in repo.log()] == ["c2", "c1"]
        assert repo.branches["main"] == "c2"

    def test_commit_default_message(self) -> None:
        """Test that commits default to the configured message."""
        repo = make_repo({"a": 1})
        commit_id = repo.commit({"a": 2})
        assert repo.commits[commit_id].message == "Update"

    def test_commit_accepts_unchanged_data(self) -> None:
        """Test that identical data still creates a commit."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 1})
        assert len(repo.commits) == 2

    def test_commit_records_branch(self) -> None:
        """Test that a commit records the branch it was made on."""
        repo = make_repo({"a": 1})
        repo.switch_branch("feature")
        commit_id = repo.commit({"a": 2})
        assert repo.commits[commit_id].branch == "feature"

    def test_commit_invalid_snapshot(self) -> None:
        """Test that unsupported values are rejected without changing state."""
        repo = make_repo({"a": 1})

        with pytest.raises(InvalidSnapshotError):
            repo.commit({"a": {1, 2}})

        assert repo.head == "c1"
        assert len(repo.commits) == 1

    def test_get_data_returns_copy(self) -> None:
        """Test that callers cannot mutate stored data."""
        repo = make_repo({"items": [1, 2]})

        data = repo.get_data()
        data["items"].append(3)

        assert repo.get_data() == {"items": [1, 2]}

    def test_commit_copies_input(self) -> None:
        """Test that mutating the committed object does not change the commit."""
        data = {"a": [1]}
        repo = make_repo(data)
        data["a"].append(2)
        assert repo.get_data() == {"a": [1]}

    def test_get_commit(self) -> None:
        """Test reading a specific commit."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})

        assert repo.get_commit("c1") == {"a": 1}
        with pytest.raises(CommitNotFoundError):
            repo.get_commit("missing")

    def test_commits_view_is_read_only(self) -> None:
        """Test that the commits mapping cannot be modified."""
        repo = make_repo({"a": 1})
        with pytest.raises(TypeError):
            repo.commits["c9"] = repo.commits["c1"]

    def test_commits_view_returns_copies(self) -> None:
        """Test that commits looked up through the view cannot alter the store."""
        repo = make_repo({"a": [1, 2]})
        repo.commits["c1"].data["a"].append(3)

        assert repo.get_commit("c1") == {"a": [1, 2]}
        assert "c1" in repo.commits
        assert list(repo.commits) == ["c1"]

    def test_duplicate_commit_id_rejected(self) -> None:
        """Test that a generator repeating a stored id leaves the repository unchanged."""
        repo = make_repo({"a": 1})
        repo.id_generator = CounterIdGenerator()

        with pytest.raises(DuplicateCommitIdError) as exc_info:
            repo.commit({"a": 2})

        assert exc_info.value.commit_id == "c1"
        assert repo.head == "c1"
        assert repo.get_data() == {"a": 1}
        assert len(repo.commits) == 1

    def test_branches_is_a_copy(self) -> None:
        """Test that modifying the branches dict does not affect the repository."""
        repo = make_repo({"a": 1})
        branches = repo.branches
        branches["ghost"] = "c1"
        assert "ghost" not in repo.branches

    def test_repository_config(self) -> None:
        """Test that an injected config is honoured."""
        repo = make_repo(
            {"a": 1}, config=RepositoryConfig(default_branch="trunk", commit_message="Save")
        )
        repo.commit({"a": 2})

        assert repo.current_branch == "trunk"
        assert repo.branches == {"trunk": "c2"}
        assert repo.commits["c2"].message == "Save"

    def test_id_strategy_from_config(self) -> None:
        """Test that the id generator follows the configured strategy."""
        repo = Repository({"a": 1}, config=RepositoryConfig(id_strategy="counter"))
        assert repo.head == "c1"


class TestBranches:
    """Tests for branching and checkout."""

    def test_checkout_branch_returns_its_data(self) -> None:
        """Test that checking out main returns data from before branching."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2}, "update")

        repo.branch("feature")
        repo.switch_branch("feature")
        repo.commit({"a": 3})

        assert repo.checkout("main") == {"a": 2}
        assert repo.current_branch == "main"
        assert repo.get_data() == {"a": 2}

    def test_branch_does_not_switch(self) -> None:
        """Test that branch() leaves the current branch alone."""
        repo = make_repo({"a": 1})
        assert repo.branch("feature") == "feature"

        assert repo.current_branch == "main"
        assert repo.branches["feature"] == "c1"

    def test_branch_already_exists(self) -> None:
        """Test that duplicate branch names are rejected."""
        repo = make_repo({"a": 1})
        repo.branch("feature")

        with pytest.raises(BranchAlreadyExistsError):
            repo.branch("feature")
        with pytest.raises(BranchAlreadyExistsError):
            repo.branch("main")

    def test_branch_on_empty_repository(self) -> None:
        """Test that branches can be created before any commit."""
        repo = make_repo()
        repo.branch("feature")
        assert repo.branches == {"main": None, "feature": None}

    def test_switch_branch_creates_missing(self) -> None:
        """Test that switch_branch creates the branch at HEAD."""
        repo = make_repo({"a": 1})
        repo.switch_branch("feature")

        assert repo.current_branch == "feature"
        assert repo.head == "c1"
        assert repo.branches["feature"] == "c1"

    def test_checkout_unknown_target(self) -> None:
        """Test that unknown targets are rejected."""
        repo = make_repo({"a": 1})
        with pytest.raises(BranchOrCommitNotFoundError):
            repo.checkout("nowhere")
        assert repo.head == "c1"

    def test_checkout_commit_detaches(self) -> None:
        """Test that checking out a commit id moves HEAD only."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})

        assert repo.checkout("c1") == {"a": 1}
        assert repo.head == "c1"
        assert repo.current_branch == "main"
        assert repo.branches["main"] == "c2"
        assert repo.is_detached

    def test_commit_while_detached_rewrites_branch(self) -> None:
        """Test that committing on a detached HEAD moves the current branch."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})
        repo.checkout("c1")

        new_id = repo.commit({"a": 10})

        assert repo.commits[new_id].parent_id == "c1"
        assert repo.branches["main"] == new_id
        assert not repo.is_detached
        assert [entry.commit_id for entry in repo.log()] == [new_id, "c1"]

    def test_branch_name_wins_over_commit_id(self) -> None:
        """Test that a branch named like a commit id is checked out as a branch."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})
        repo.refs.save_branch("c1", "c2")

        repo.checkout("c1")

        assert repo.current_branch == "c1"
        assert repo.head == "c2"

    def test_list_branches(self) -> None:
        """Test branch listing."""
        repo = make_repo({"a": 1})
        repo.branch("feature")

        assert repo.list_branches() == [
            BranchInfo(name="main", current=True, head="c1"),
            BranchInfo(name="feature", current=False, head="c1"),
        ]


class TestHistory:
    """Tests for log() and history()."""

    def test_log_default_limit(self) -> None:
        """Test that log() defaults to the configured limit."""
        repo = make_repo({"n": 0})
        for n in range(1, 12):
            repo.commit({"n": n})

        assert len(repo.log()) == 10
        assert len(repo.history()) == 12

    def test_log_unbounded(self) -> None:
        """Test log with an infinite limit."""
        repo = make_repo({"n": 0})
        for n in range(1, 4):
            repo.commit({"n": n})

        entries = repo.log(float("inf"))
        assert [entry.commit_id for entry in entries] == ["c4", "c3", "c2", "c1"]

    def test_log_zero_limit(self) -> None:
        """Test that a non-positive limit returns nothing."""
        repo = make_repo({"a": 1})
        assert repo.log(0) == []
        assert repo.log(-1) == []

    def test_log_follows_current_branch(self) -> None:
        """Test that log only walks the current branch's ancestry."""
        repo = make_repo({"a": 1})
        repo.switch_branch("feature")
        repo.commit({"a": 2})
        repo.checkout("main")
        repo.commit({"a": 3})

        assert [entry.commit_id for entry in repo.history()] == ["c3", "c1"]

    def test_log_entry_fields(self) -> None:
        """Test log entry contents."""
        repo = make_repo({"a": 1})
        entry = repo.log(1)[0]

        assert entry.to_dict() == {
            "id": "c1",
            "message": "Initial commit",
            "timestamp": TIMESTAMP,
            "branch": "main",
        }

    def test_diff_between_commits(self) -> None:
        """Test diffing two commits."""
        repo = make_repo({"a": 1, "b": 1})
        repo.commit({"a": 2, "c": 3})

        result = repo.diff("c1", "c2")
        assert result.to_dict() == {
            "added": [{"path": "c", "value": 3}],
            "removed": [{"path": "b", "value": 1}],
            "modified": [{"path": "a", "old": 1, "new": 2}],
        }

    def test_diff_missing_commit(self) -> None:
        """Test that diff requires both commits."""
        repo = make_repo({"a": 1})
        with pytest.raises(CommitNotFoundError):
            repo.diff("c1", "c9")

    def test_is_dirty(self) -> None:
        """Test comparing data against HEAD."""
        repo = make_repo({"a": 1})

        assert not repo.is_dirty({"a": 1})
        assert repo.is_dirty({"a": 2})
        assert repo.is_dirty({"a": True})
        assert not make_repo().is_dirty(None)
        assert make_repo().is_dirty({})


class TestRevertAndSquash:
    """Tests for revert() and squash()."""

    def test_revert(self) -> None:
        """Test reverting to an older commit."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})

        revert_id = repo.revert("c1")

        assert repo.get_data() == {"a": 1}
        assert repo.commits[revert_id].message == "Revert to c1"
        assert repo.commits[revert_id].parent_id == "c2"
        assert len(repo.history()) == 3

    def test_revert_uses_short_id(self) -> None:
        """Test that revert messages abbreviate long ids."""
        repo = make_repo(
            {"a": 1}, id_generator=CounterIdGenerator(prefix="commit-")
        )
        repo.commit({"a": 2})

        revert_id = repo.revert("commit-1")
        assert repo.commits[revert_id].message == "Revert to commit-"

    def test_revert_missing_commit(self) -> None:
        """Test reverting to an unknown commit."""
        repo = make_repo({"a": 1})
        with pytest.raises(CommitNotFoundError):
            repo.revert("c9")
        assert len(repo.commits) == 1

    def test_squash_two_of_four(self) -> None:
        """Test squashing the two newest commits of a four commit history."""
        repo = make_repo({"n": 0})
        repo.commit({"n": 1})
        repo.commit({"n": 2})
        repo.commit({"n": 3})
        assert len(repo.log(float("inf"))) == 4

        squash_id = repo.squash(2)

        squashed = repo.commits[squash_id]
        assert squashed.parent_id == "c1"
        assert squashed.data == {"n": 3}
        assert squashed.message == "Squashed commits"
        assert squashed.squashed_commits == ["c4", "c3"]
        assert len(repo.log(float("inf"))) == 2
        assert repo.get_data() == {"n": 3}

    def test_squash_keeps_old_commits_in_store(self) -> None:
        """Test that squashed commits stay in the store."""
        repo = make_repo({"n": 0})
        repo.commit({"n": 1})
        repo.commit({"n": 2})

        repo.squash(2, "combined")

        assert {"c1", "c2", "c3"} <= set(repo.commits)
        assert repo.commits["c4"].message == "combined"

    def test_squash_more_than_history(self) -> None:
        """Test squashing more commits than exist."""
        repo = make_repo({"n": 0})
        repo.commit({"n": 1})

        squash_id = repo.squash(5)

        assert repo.commits[squash_id].parent_id is None
        assert repo.commits[squash_id].squashed_commits == ["c2", "c1"]
        assert len(repo.history()) == 1

    def test_squash_not_enough_commits(self) -> None:
        """Test that squash needs at least two commits."""
        repo = make_repo({"n": 0})

        with pytest.raises(NotEnoughCommitsError):
            repo.squash(2)
        with pytest.raises(NotEnoughCommitsError):
            make_repo().squash(1)
        assert len(repo.commits) == 1


class TestForkAndClone:
    """Tests for fork(), clone() and get_fork_info()."""

    def test_fork_is_independent(self) -> None:
        """Test that mutating a fork leaves the original unchanged."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})
        commits_before = dict(repo.commits)
        branches_before = repo.branches

        forked = repo.fork("f")
        forked.commit({"a": 3})
        forked.branch("another")

        assert dict(repo.commits) == commits_before
        assert repo.branches == branches_before
        assert repo.head == "c2"

    def test_fork_with_name(self) -> None:
        """Test that a named fork records a commit and moves to the new branch."""
        repo = make_repo({"a": 1})

        forked = repo.fork("f")

        assert forked.current_branch == "f"
        assert forked.head == "c2"
        assert forked.commits["c2"].message == "Forked from main as f"
        assert forked.commits["c2"].branch == "main"
        assert forked.branches == {"main": "c2", "f": "c2"}
        assert forked.get_data() == {"a": 1}

    def test_fork_without_name(self) -> None:
        """Test that an unnamed fork is a plain copy."""
        repo = make_repo({"a": 1})
        forked = repo.fork()

        assert forked.head == "c1"
        assert forked.branches == repo.branches
        assert len(forked.commits) == 1

    def test_fork_of_empty_repository(self) -> None:
        """Test that forking an empty repository adds no commit."""
        forked = make_repo().fork("f")
        assert forked.head is None
        assert forked.current_branch == "main"

    def test_fork_shares_id_generator(self) -> None:
        """Test that forks draw ids from the same generator."""
        repo = make_repo({"a": 1})
        clone = repo.clone()

        assert clone.id_generator is repo.id_generator
        assert repo.commit({"a": 2}) != clone.commit({"a": 3})

    def test_clone_does_not_copy_stash(self) -> None:
        """Test that clones start with an empty stash."""
        repo = make_repo({"a": 1})
        repo.stash({"a": 9})

        assert len(repo.clone().stash_list()) == 0

    def test_clone_data_is_independent(self) -> None:
        """Test that cloned commits do not share data objects."""
        repo = make_repo({"items": [1]})
        clone = repo.clone()
        assert clone.store.load_commit("c1").data is not repo.store.load_commit("c1").data

    def test_fork_then_diverge(self) -> None:
        """Test that independent commits after a fork diverge."""
        repo_a = make_repo({"a": 1})
        repo_b = repo_a.fork()
        repo_a.commit({"a": 2})
        repo_b.commit({"a": 3})

        comparison = repo_a.compare_forks(repo_b)

        assert comparison.diverged
        assert comparison.ahead == 1
        assert comparison.behind == 1

    def test_get_fork_info(self) -> None:
        """Test the fork info summary."""
        repo = make_repo({"a": 1})
        repo.commit({"a": 2})
        repo.branch("feature")

        info = repo.get_fork_info()

        assert info.total_commits == 2
        assert info.branches == ["main", "feature"]
        assert info.current_branch == "main"
        assert info.head == "c2"
        assert info.latest_commit.data == {"a": 2}
        assert info.summary() == "2 commits, 2 branches, on main at c2"


class TestExportImport:
    """Tests for export() and import_()."""

    def test_round_trip(self) -> None:
        """Test that import(export()) reproduces the repository."""
        repo = make_repo({"a": 1})
        repo.commit({"a": [1, 2, {"b": None}]}, "second")
        repo.switch_branch("feature")
        repo.commit({"a": 3})
        repo.stash({"wip": True}, "later")

        restored = Repository.from_export(repo.export())

        assert restored.get_data() == repo.get_data()
        assert restored.log(float("inf")) == repo.log(float("inf"))
        assert restored.list_branches() == repo.list_branches()
        assert restored.head == repo.head
        assert restored.stash_list() == repo.stash_list()

    def test_export_format(self) -> None:
        """Test the top-level keys of the export."""
        repo = make_repo({"a": 1})
        exported = json.loads(repo.export())

        assert exported == {
            "commits": {
                "c1": {
                    "id": "c1",
                    "data": {"a": 1},
                    "message": "Initial commit",
                    "timestamp": TIMESTAMP,
                    "parent": None,
                    "branch": "main",
                }
            },
            "branches": {"main": "c1"},
            "currentBranch": "main",
            "HEAD": "c1",
            "stashStack": [],
        }

    def test_import_replaces_state(self) -> None:
        """Test that import discards existing state."""
        source = make_repo({"x": 1})
        target = make_repo({"y": 1}, id_generator=CounterIdGenerator(prefix="t"))
        target.branch("old")

        target.import_(source.export())

        assert target.get_data() == {"x": 1}
        assert "old" not in target.branches
        assert "t1" not in target.commits

    def test_commit_after_import_gets_fresh_id(self) -> None:
        """Test that a counter generator skips ids already imported."""
        source = make_repo({"a": 1})
        source.commit({"a": 2})

        restored = Repository.from_export(
            source.export(), id_generator=CounterIdGenerator(), clock=lambda: TIMESTAMP
        )
        commit_id = restored.commit({"a": 3}, "after import")

        assert commit_id == "c3"
        assert restored.get_data() == {"a": 3}
        assert [entry.message for entry in restored.log()] == [
            "after import",
            "Update",
            "Initial commit",
        ]

    def test_load_dict_copies_input(self) -> None:
        """Test that mutating the imported dict does not reach stored data."""
        repo = make_repo({"a": 1})
        repo.stash({"wip": 1})
        raw = repo.to_dict()

        restored = make_repo()
        restored.load_dict(raw)
        raw["commits"]["c1"]["data"]["a"] = 999
        raw["stashStack"][0]["data"]["wip"] = 999

        assert restored.get_data() == {"a": 1}
        assert restored.stash_apply() == {"wip": 1}

    def test_import_without_stash(self) -> None:
        """Test that a missing stash stack imports as empty."""
        data = json.loads(make_repo({"a": 1}).export())
        del data["stashStack"]

        repo = Repository.from_export(json.dumps(data))
        assert repo.stash_list() == []

    def test_import_invalid_json(self) -> None:
        """Test that non-JSON text is rejected."""
        repo = make_repo({"a": 1})
        with pytest.raises(ImportFormatError):
            repo.import_("not json")
        with pytest.raises(ImportFormatError):
            repo.import_("[1, 2]")
        assert repo.get_data() == {"a": 1}

    def test_import_missing_keys(self) -> None:
        """Test that exports without the required keys are rejected."""
        with pytest.raises(ImportFormatError):
            Repository.from_export(json.dumps({"commits": {}}))

    def test_import_dangling_reference(self) -> None:
        """Test that dangling references surface when traversed."""
        exported = json.dumps(
            {
                "commits": {
                    "c2": {"id": "c2", "data": 1, "message": "m", "parent": "c1"}
                },
                "branches": {"main": "c2"},
                "currentBranch": "main",
                "HEAD": "c2",
            }
        )

        repo = Repository.from_export(exported)

        assert repo.get_data() == 1
        with pytest.raises(CommitNotFoundError):
            repo.log(10)

    def test_squashed_commits_survive_round_trip(self) -> None:
        """Test that squash audit ids are exported."""
        repo = make_repo({"n": 0})
        repo.commit({"n": 1})
        squash_id = repo.squash(1)

        restored = Repository.from_export(repo.export())
        assert restored.commits[squash_id].squashed_commits == ["c2"]


class TestPackageExports:
    """Tests for top-level exports."""

    def test_compute_diff_identity(self) -> None:
        """Test that diffing a value with itself reports nothing."""
        value = {"a": [1, {"b": "c"}], "d": None}
        assert compute_diff(value, value).to_dict() == {
            "added": [],
            "removed": [],
            "modified": [],
        }
