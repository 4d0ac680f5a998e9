import pytest

from backoffice import hub
from backoffice.errors import StoreError
from backoffice.realtime.hub import ChangeEvent, DELETE, INSERT, UPDATE
from backoffice.resources.registry import blogs, courses, lecturers
from backoffice.state.table import ASC, DESC, TableState

ROWS = [
    {'id': 3, 'title': 'Intro to Go', 'text': 'Goroutines', 'tags': ['go'], 'created_at': '2024-03-03T10:00:00'},
    {'id': 2, 'title': 'Rust ownership', 'text': 'Borrowing', 'tags': ['rust'], 'created_at': '2024-03-02T10:00:00'},
    {'id': 1, 'title': 'Python tips', 'text': None, 'tags': ['golang-vs-python'], 'created_at': '2024-03-01T10:00:00'},
]


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class FakeResource:
    """In-memory resource with the blog schema"""

    schema = blogs.schema
    table = blogs.table

    def __init__(self, rows=None, fail_delete=False):
        self.rows = [dict(r) for r in (rows if rows is not None else ROWS)]
        self.fail_delete = fail_delete
        self.during_delete = None
        self.state = None

    def list(self):
        return [dict(r) for r in self.rows]

    def list_or_empty(self):
        return self.list()

    def delete(self, record_id, origin=None):
        if self.state is not None:
            self.during_delete = [r['id'] for r in self.state.rows()]
        if self.fail_delete:
            raise StoreError('connection reset')
        self.rows = [r for r in self.rows if r['id'] != record_id]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state(clock):
    resource = FakeResource()
    table = TableState(resource, notice_ttl=3, clock=clock)
    resource.state = table
    table.load()
    return table


class TestSearchAndSort:
    def test_loading_until_first_fetch(self):
        table = TableState(FakeResource())
        assert table.loading
        table.load()
        assert not table.loading

    def test_search_matches_text_fields_and_tags(self, state):
        state.set_search('go')
        assert [r['id'] for r in state.rows()] == [3, 1]

    def test_search_is_case_insensitive(self, state):
        state.set_search('RUST')
        assert [r['id'] for r in state.rows()] == [2]

    def test_default_order_is_newest_first(self, state):
        assert [r['id'] for r in state.rows()] == [3, 2, 1]

    def test_sort_toggles_on_same_field(self, state):
        state.sort_by('title')
        assert state.sort_direction == ASC
        assert [r['title'] for r in state.rows()] == ['Intro to Go', 'Python tips', 'Rust ownership']
        state.sort_by('title')
        assert state.sort_direction == DESC
        assert [r['title'] for r in state.rows()] == ['Rust ownership', 'Python tips', 'Intro to Go']

    def test_missing_values_sort_last(self, state):
        state.sort_by('text')
        assert state.rows()[-1]['id'] == 1
        state.sort_by('text')
        assert state.rows()[-1]['id'] == 1

    def test_empty_after_load(self):
        table = TableState(FakeResource(rows=[]))
        table.load()
        assert table.is_empty


class CourseRows(FakeResource):
    schema = courses.schema
    table = courses.table


class LecturerRows(FakeResource):
    schema = lecturers.schema
    table = lecturers.table


class TestTypedSort:
    def test_numeric_fields_sort_by_value(self):
        table = TableState(CourseRows([
            {'id': 1, 'title': 'A', 'price': 10},
            {'id': 2, 'title': 'B', 'price': 9},
            {'id': 3, 'title': 'C', 'price': 100.5},
            {'id': 4, 'title': 'D', 'price': None},
        ]))
        table.load()
        table.sort_by('price')
        assert [r['price'] for r in table.rows()] == [9, 10, 100.5, None]
        table.sort_by('price')
        assert [r['price'] for r in table.rows()] == [100.5, 10, 9, None]

    def test_date_fields_sort_by_timestamp(self):
        table = TableState(LecturerRows([
            {'id': 1, 'fullName': 'Ana', 'updated_at': '2024-03-09 23:00:00'},
            {'id': 2, 'fullName': 'Luka', 'updated_at': '2024-03-09T22:00:00'},
            {'id': 3, 'fullName': 'Nino', 'updated_at': '2024-03-10T08:30:00'},
        ]))
        table.load()
        table.sort_by('updated_at')
        assert [r['id'] for r in table.rows()] == [2, 1, 3]

        table.sort_by('fullName')
        assert [r['fullName'] for r in table.rows()] == ['Ana', 'Luka', 'Nino']


class TestDelete:
    def test_requires_confirmation(self, state):
        assert state.delete(2) is False
        assert len(state.rows()) == 3

    def test_row_disappears_before_store_answers(self, state):
        assert state.delete(2, confirm=True) is True
        assert state.resource.during_delete == [3, 1]
        assert [r['id'] for r in state.rows()] == [3, 1]
        assert state.notice.to_dict() == {'type': 'success', 'message': 'Blog successfully deleted'}

    def test_failed_delete_restores_rows(self, clock):
        resource = FakeResource(fail_delete=True)
        table = TableState(resource, clock=clock)
        resource.state = table
        table.load()
        assert table.delete(2, confirm=True) is False
        assert resource.during_delete == [3, 1]
        assert [r['id'] for r in table.rows()] == [3, 2, 1]
        assert table.notice.to_dict() == {'type': 'error', 'message': 'Failed to delete blog. Please try again.'}
        assert table.deleting is None

    def test_notice_expires(self, state, clock):
        state.delete(2, confirm=True)
        clock.now += 2.9
        assert state.notice is not None
        clock.now += 0.2
        assert state.notice is None


class TestLiveChanges:
    def test_insert_is_prepended_once(self, state):
        event = ChangeEvent(blogs.table, INSERT, new={'id': 4, 'title': 'New'})
        state.apply_change(event)
        state.apply_change(event)
        assert [r['id'] for r in state.records] == [4, 3, 2, 1]

    def test_update_replaces_in_place(self, state):
        state.apply_change(ChangeEvent(blogs.table, UPDATE, new=dict(ROWS[1], title='Rust lifetimes')))
        assert [r['title'] for r in state.records] == ['Intro to Go', 'Rust lifetimes', 'Python tips']

    def test_delete_by_another_admin_notifies(self, state):
        state.apply_change(ChangeEvent(blogs.table, DELETE, old={'id': 3}))
        assert [r['id'] for r in state.records] == [2, 1]
        assert state.notice.to_dict() == {'type': 'info', 'message': 'Blog was deleted by another admin'}

    def test_own_delete_echo_is_silent(self, state, clock):
        state.delete(2, confirm=True)
        clock.now += 10
        state.apply_change(ChangeEvent(blogs.table, DELETE, old={'id': 2}))
        assert state.notice is None
        assert [r['id'] for r in state.records] == [3, 1]

    def test_other_tables_are_ignored(self, state):
        state.apply_change(ChangeEvent('courses', DELETE, old={'id': 3}))
        assert len(state.records) == 3

    def test_live_merges_store_writes(self, app):
        table = TableState(blogs)
        table.load()
        with table.live():
            assert hub.subscriber_count(blogs.table) == 1
            created = blogs.create({'title': 'Streamed'})
            assert table.sync() == 1
            assert [r['id'] for r in table.records] == [created['id']]
        assert hub.subscriber_count(blogs.table) == 0
        assert table.subscription is None

    def test_sessions_tell_their_deletes_apart(self, app):
        record = blogs.create({'title': 'Shared'})
        mine = TableState(blogs, origin='session-a')
        theirs = TableState(blogs, origin='session-b')
        mine.load()
        theirs.load()
        with mine.live(), theirs.live():
            assert mine.delete(record['id'], confirm=True)
            mine.sync()
            theirs.sync()
        assert mine.notice.to_dict() == {'type': 'success', 'message': 'Blog successfully deleted'}
        assert theirs.notice.to_dict() == {'type': 'info', 'message': 'Blog was deleted by another admin'}
        assert theirs.records == []

    def test_own_origin_is_recognised_without_local_bookkeeping(self, state):
        state.apply_change(ChangeEvent(blogs.table, DELETE, old={'id': 3}, origin=state.origin))
        assert state.notice is None
