import pytest

from backoffice import object_storage
from backoffice.errors import ValidationError
from backoffice.resources.registry import blogs, courses, lecturers, offered_courses
from backoffice.state.forms import BlogDraft, CourseDraft, LecturerDraft, OfferedCourseDraft

from conftest import FakeResponse

STORED_OFFER = {
    'title': 'Go Bootcamp',
    'lecturers': ['Nino'],
    'lecturers_details': ['Backend engineer'],
    'course_details': ['Live sessions'],
    'course_category': ['backend'],
    'price': 80,
    'old_price': 100,
    'syllabus_title': ['Intro'],
    'syllabus_content': {
        'Intro': {'item_1': 'Setup', 'item_2': 'Modules', 'item_10': 'Tooling'},
        'Old intro': {'item_1': 'Stale'},
    },
}


@pytest.fixture
def stored_offer(app):
    return offered_courses.create(STORED_OFFER)


class TestOfferedCourseDraft:
    def test_new_draft_starts_with_one_blank_section(self, app):
        form = OfferedCourseDraft(offered_courses)
        assert len(form.sections) == 1
        assert form.sections[0].items == ['']
        assert form.data['lecturers'] == ['']

    def test_discount_follows_prices(self, app):
        form = OfferedCourseDraft(offered_courses)
        form.set_field('old_price', '100')
        form.set_field('price', '80')
        assert form.data['discount_percentage'] == '20'
        form.set_price(120)
        assert form.data['discount_percentage'] == ''

    def test_non_numeric_price_is_rejected(self, app):
        form = OfferedCourseDraft(offered_courses)
        with pytest.raises(ValidationError):
            form.set_price('eighty')

    def test_items_load_in_numeric_key_order(self, stored_offer):
        form = OfferedCourseDraft.edit(offered_courses, stored_offer['id'])
        assert form.sections[0].items == ['Setup', 'Modules', 'Tooling']

    def test_orphaned_content_is_reported(self, stored_offer):
        form = OfferedCourseDraft.edit(offered_courses, stored_offer['id'])
        assert form.orphaned_keys == ['Old intro']
        titles, content = form.syllabus_payload()
        assert titles == ['Intro']
        assert 'Old intro' not in content

    def test_rename_keeps_section_items(self, stored_offer):
        form = OfferedCourseDraft.edit(offered_courses, stored_offer['id'])
        section = form.sections[0]
        form.rename_section(section.id, 'Getting started')
        titles, content = form.syllabus_payload()
        assert titles == ['Getting started']
        assert content == {'Getting started': {'item_1': 'Setup', 'item_2': 'Modules', 'item_3': 'Tooling'}}

    def test_blank_syllabus_gets_default_title(self, app):
        form = OfferedCourseDraft(offered_courses)
        assert form.syllabus_payload() == (['სილაბუსი'], {'სილაბუსი': {'item_1': ''}})

    def test_removing_last_item_leaves_one_blank(self, app):
        form = OfferedCourseDraft(offered_courses)
        section = form.sections[0]
        form.remove_section_item(section.id, 0)
        assert section.items == ['']
        form.remove_section(section.id)
        assert len(form.sections) == 1

    def test_required_lists(self, app):
        form = OfferedCourseDraft(offered_courses, {'title': 'Draft', 'course_details': ['Live']})
        assert form.submit() is None
        assert form.error == 'lecturers არის აუცილებელი'
        assert offered_courses.list() == []

    def test_submit_updates_existing_record(self, stored_offer):
        form = OfferedCourseDraft.edit(offered_courses, stored_offer['id'])
        form.set_field('title', 'Go Bootcamp 2')
        form.add_section_item(form.sections[0].id, 'Testing')
        saved = form.submit()
        assert saved['id'] == stored_offer['id']
        assert saved['title'] == 'Go Bootcamp 2'
        assert saved['syllabus_content']['Intro']['item_4'] == 'Testing'
        assert len(offered_courses.list()) == 1
        assert form.sections[0].items[-1] == 'Testing'

    def test_inline_fallback_when_storage_fails(self, app, fake_storage):
        fake_storage.fail_with = FakeResponse(500, {'message': 'bucket offline'})
        form = OfferedCourseDraft(offered_courses, {'title': 'Draft'})
        result = form.attach_image(object_storage, 'cover.png', b'\x89PNG small', content_type='image/png')
        assert result.inline
        assert form.data['image'].startswith('data:image/png;base64,')
        assert form.upload_error is None

    def test_oversized_file_fails_without_losing_the_form(self, app, fake_storage):
        fake_storage.fail_with = FakeResponse(500, {'message': 'bucket offline'})
        form = OfferedCourseDraft(offered_courses, {'title': 'Draft'})
        result = form.attach_image(object_storage, 'cover.png', b'x' * 2048, content_type='image/png',
                                   field='courseIcon')
        assert result is None
        assert form.upload_error == 'Failed to upload courseIcon. Please try again. Error: Upload failed: bucket offline'
        assert form.data['title'] == 'Draft'
        assert form.data['courseIcon'] == ''

    def test_upload_goes_under_offers_folder(self, app, fake_storage):
        form = OfferedCourseDraft(offered_courses)
        form.attach_image(object_storage, 'cover.png', b'png', content_type='image/png')
        assert fake_storage.uploads[0]['url'].startswith('http://storage.test/storage/v1/object/public/offers/')
        assert form.data['image'].startswith('http://storage.test/storage/v1/object/public/public/offers/')

    def test_missing_title_message(self, app):
        form = OfferedCourseDraft(offered_courses, {'title': '  '})
        assert form.submit() is None
        assert form.error == 'სათაური აუცილებელია'

    def test_submit_keeps_published_record_intact(self, stored_offer):
        with offered_courses.subscribe() as subscription:
            form = OfferedCourseDraft.edit(offered_courses, stored_offer['id'], origin='session-a')
            saved = form.submit()
            event = subscription.get(timeout=0)
        assert saved['syllabus_title'] == ['Intro']
        assert event.origin == 'session-a'
        assert event.new['syllabus_title'] == ['Intro']
        assert event.new['syllabus_content']['Intro']['item_1'] == 'Setup'

        form.set_field('title', 'Edited after save')
        form.data['lecturers'].append('Giorgi')
        assert event.new['title'] == 'Go Bootcamp'
        assert event.new['lecturers'] == ['Nino']
        assert saved['lecturers'] == ['Nino']

    def test_repeated_title_resaves_unchanged(self, app):
        stored = offered_courses.create(dict(
            STORED_OFFER,
            syllabus_title=['Week', 'Week'],
            syllabus_content={'Week': {'item_1': 'x'}},
        ))
        for _ in range(2):
            saved = OfferedCourseDraft.edit(offered_courses, stored['id']).submit()
        assert saved['syllabus_title'] == ['Week', 'Week']
        assert saved['syllabus_content'] == {'Week': {'item_1': 'x'}}

    def test_non_image_attach_is_rejected_before_upload(self, app, fake_storage):
        form = OfferedCourseDraft(offered_courses, {'title': 'Draft'})
        assert form.attach_image(object_storage, 'notes.txt', b'hello', content_type='text/plain') is None
        assert form.upload_error == 'Failed to upload image. Please try again. Error: File must be an image.'
        assert fake_storage.uploads == []


class TestBlogDraft:
    def test_tags_are_unique_and_compacted(self, app):
        form = BlogDraft(blogs, {'title': 'Post'})
        assert form.add_tag('go')
        assert not form.add_tag('go')
        assert not form.add_tag('  ')
        form.data['tags'].append('')
        saved = form.submit()
        assert saved['tags'] == ['go']

    def test_remove_tag(self, app):
        form = BlogDraft(blogs, {'tags': ['go', 'rust']})
        form.remove_tag('go')
        assert form.data['tags'] == ['rust']

    def test_missing_title(self, app):
        form = BlogDraft(blogs)
        assert form.submit() is None
        assert form.error == 'Title is required'

    def test_upload_records_path_and_name(self, app, fake_storage):
        form = BlogDraft(blogs, {'title': 'Post'})
        result = form.attach_image(object_storage, 'cover.JPG', b'jpeg', content_type='image/jpeg')
        assert form.data['image'] == result.url
        assert form.data['image_file_path'].endswith('.jpg')
        assert form.data['image_file_name'] == 'cover.JPG'

    def test_failed_upload_reports_error(self, app, fake_storage):
        fake_storage.fail_with = FakeResponse(403, text='denied')
        form = BlogDraft(blogs, {'title': 'Post'})
        assert form.attach_image(object_storage, 'cover.png', b'png') is None
        assert form.upload_error == 'Upload failed: denied'
        assert form.submit()['title'] == 'Post'


class TestCourseDraft:
    def test_payload_trims_syllabus(self, app):
        form = CourseDraft(courses, {'title': 'Python'})
        form.set_item('syllabus_title', 0, 'Basics')
        form.set_syllabus_item(0, 0, 'Variables')
        form.add_syllabus_section('')
        form.add_item('course_details', 'Evening group')
        saved = form.submit()
        assert saved['syllabus_title'] == ['Basics']
        assert saved['syllabus_content'] == [['Variables']]
        assert saved['course_details'] == ['Evening group']

    def test_all_blank_course_details_stored_as_single_blank(self, app):
        saved = CourseDraft(courses, {'title': 'Python'}).submit()
        assert saved['course_details'] == ['']
        assert saved['syllabus_title'] == ['']
        assert saved['syllabus_content'] == []


class TestLecturerDraft:
    def test_full_name_required(self, app):
        form = LecturerDraft(lecturers, {'field': 'Design'})
        assert form.submit() is None
        assert form.error == 'fullName is required'

    def test_edit_round_trip(self, app):
        stored = lecturers.create({'fullName': 'Ana Beridze'})
        form = LecturerDraft.edit(lecturers, stored['id'])
        form.set_field('field', 'UX')
        assert form.submit()['field'] == 'UX'

    def test_portrait_goes_to_lecturers_bucket(self, app, fake_storage):
        form = LecturerDraft(lecturers, {'fullName': 'Ana Beridze'})
        form.attach_image(object_storage, 'portrait.png', b'png', field='lecturer_image')
        assert fake_storage.uploads[0]['url'].startswith('http://storage.test/storage/v1/object/lecturers/')
        assert form.data['lecturer_image'].startswith('http://storage.test/storage/v1/object/public/lecturers/')
