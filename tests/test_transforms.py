"""Tests for the mirror -> API shape transforms."""

from noor.transforms.hadith import (
    BOOK_FIELDS,
    CHAPTER_FIELDS,
    HADITH_FIELDS,
    book_from_mirror,
    build_pagination,
    chapter_from_mirror,
    extract_tags,
    hadith_from_api,
    hadith_from_mirror,
    public_pagination,
    to_public_hadith,
)
from noor.transforms.quran import (
    AYAH_FIELDS,
    ayah_from_api,
    ayah_from_mirror,
    is_translation_edition,
    paginate,
    search_match_from_api,
    search_match_from_mirror,
    surah_from_api,
    surah_from_mirror,
    surah_summary_from_api,
    surah_summary_from_mirror,
)

from .conftest import (
    AYAT_AL_KURSI,
    api_ayah,
    api_surah,
    api_surah_summary,
    hadith_record,
    mirror_ayah_rows,
    mirror_surah_rows,
)


def schema(value):
    """Field names and value types, recursively."""
    if isinstance(value, dict):
        return {k: schema(v) for k, v in value.items()}
    if isinstance(value, list):
        return [schema(value[0])] if value else []
    return type(value).__name__


def surah_row(number):
    return next(r for r in mirror_surah_rows() if r["number"] == number)


def ayah_row(surah, ayah):
    return next(r for r in mirror_ayah_rows() if (r["surah_number"], r["number_in_surah"]) == (surah, ayah))


class TestQuranShapeEquivalence:
    """Mirror-built records must have the same schema as API-built ones."""

    def test_surah_summary(self):
        assert schema(surah_summary_from_mirror(surah_row(2))) == schema(surah_summary_from_api(api_surah_summary(2)))
        assert surah_summary_from_mirror(surah_row(2)) == surah_summary_from_api(api_surah_summary(2))

    def test_surah_with_ayahs(self):
        """Test that a mirror surah matches the API surah field for field."""
        rows = [r for r in mirror_ayah_rows() if r["surah_number"] == 1]

        from_mirror = surah_from_mirror(surah_row(1), rows, "quran-uthmani")
        from_api = surah_from_api(api_surah(1))

        assert schema(from_mirror) == schema(from_api)
        assert from_mirror == from_api

    def test_ayah_with_surah(self):
        from_mirror = ayah_from_mirror(ayah_row(2, 255), "quran-uthmani", surah_row=surah_row(2))
        from_api = ayah_from_api(api_ayah(2, 255, with_surah=True), with_surah=True)

        assert schema(from_mirror) == schema(from_api)
        assert from_mirror == from_api

    def test_ayah_without_surah_has_only_ayah_fields(self):
        assert tuple(ayah_from_mirror(ayah_row(1, 1))) == AYAH_FIELDS

    def test_search_match(self):
        match = {"number": 262, "text": "Arabic 2:255", "numberInSurah": 255, "surah": api_surah_summary(2)}

        from_mirror = search_match_from_mirror(ayah_row(2, 255), surah_row(2), "quran-uthmani")

        assert from_mirror == search_match_from_api(match)

    def test_sajda_is_boolean(self):
        assert ayah_from_mirror(ayah_row(2, 100))["sajda"] is True
        assert ayah_from_mirror(ayah_row(2, 101))["sajda"] is False


class TestQuranEditions:
    """Test edition-dependent text selection on the mirror path."""

    def test_english_edition_uses_translation(self):
        assert ayah_from_mirror(ayah_row(2, 255), "en.asad")["text"] == AYAT_AL_KURSI

    def test_arabic_editions_use_arabic_text(self):
        assert ayah_from_mirror(ayah_row(2, 255), "quran-uthmani")["text"] == "Arabic 2:255"
        assert ayah_from_mirror(ayah_row(2, 255), "ar.muyassar")["text"] == "Arabic 2:255"

    def test_missing_translation_falls_back_to_text(self):
        row = dict(ayah_row(1, 1), translation=None)

        assert ayah_from_mirror(row, "en.sahih")["text"] == "Arabic 1:1"

    def test_is_translation_edition(self):
        assert is_translation_edition("en.asad")
        assert not is_translation_edition("quran-uthmani")
        assert not is_translation_edition(None)


class TestPaginate:
    def test_offset_and_limit(self):
        assert paginate(list(range(10)), offset=2, limit=3) == [2, 3, 4]

    def test_unset_values_leave_listing_alone(self):
        assert paginate([1, 2, 3]) == [1, 2, 3]

    def test_offset_past_end(self):
        assert paginate([1, 2, 3], offset=5) == []


class TestHadithTransforms:
    """Test the HadithAPI-shaped records built from the mirror."""

    def test_hadith_shape_matches_api(self):
        """Test that mirror hadiths have the same schema as API hadiths."""
        api = hadith_from_api({"id": 1, "hadithNumber": "1", "book": {"id": 1}, "chapter": {"id": 1}})
        mirror = hadith_from_mirror(dict(hadith_record("sahih-bukhari", "1", "Revelation", "Actions..."),
                                         id=7, chapter_number=1))

        assert tuple(mirror) == HADITH_FIELDS
        assert tuple(mirror["book"]) == BOOK_FIELDS
        assert tuple(mirror["chapter"]) == CHAPTER_FIELDS
        assert schema(mirror) == schema(api)

    def test_hadith_from_mirror_values(self):
        row = dict(hadith_record("sahih-bukhari", "12", "Knowledge", "Seek knowledge"), id=99)

        hadith = hadith_from_mirror(row)

        assert hadith["id"] == 12
        assert hadith["hadithNumber"] == "12"
        assert hadith["status"] == "Sahih"
        assert hadith["book"]["bookName"] == "Sahih al-Bukhari"
        assert hadith["book"]["writerDeath"] == "256 AH"
        assert hadith["chapter"]["chapterEnglish"] == "Knowledge"
        assert hadith["chapterId"] == ""

    def test_non_numeric_hadith_number_uses_row_id(self):
        row = dict(hadith_record("sahih-bukhari", "12a", "Knowledge", "..."), id=99)

        assert hadith_from_mirror(row)["id"] == 99

    def test_book_from_mirror(self):
        book = book_from_mirror("sahih-muslim", 2, 7563, 56)

        assert book == {
            "id": 2,
            "bookName": "Sahih Muslim",
            "writerName": "Imam Muslim ibn al-Hajjaj al-Naysaburi",
            "aboutWriter": None,
            "writerDeath": "261 AH",
            "bookSlug": "sahih-muslim",
            "hadiths_count": "7563",
            "chapters_count": "56",
        }

    def test_unknown_collection_keeps_slug(self):
        assert book_from_mirror("custom-collection", 1, 1, 1)["bookName"] == "custom-collection"

    def test_chapter_from_mirror_uses_sequential_id(self):
        chapter = chapter_from_mirror("sahih-bukhari", "Belief", 2)

        assert chapter["id"] == 2
        assert chapter["chapterNumber"] == "2"
        assert chapter["chapterEnglish"] == "Belief"

    def test_to_public_hadith(self):
        hadith = hadith_from_mirror(dict(hadith_record("sahih-bukhari", "1", "Revelation", "Actions"), id=1))

        public = to_public_hadith(hadith)

        assert public["id"] == "1"
        assert public["collection"] == "sahih-bukhari"
        assert public["bookName"] == "Sahih al-Bukhari"
        assert public["chapterEnglish"] == "Revelation"
        assert public["bookInfo"] == hadith["book"]


class TestPagination:
    def test_build_pagination(self):
        assert build_pagination(2, 25, 60) == {
            "current_page": 2, "last_page": 3, "per_page": 25, "total": 60, "from": 26, "to": 50,
        }

    def test_last_page_is_partial(self):
        assert build_pagination(3, 25, 60)["to"] == 60

    def test_public_pagination(self):
        assert public_pagination(build_pagination(1, 10, 15)) == {
            "page": 1, "limit": 10, "total": 15, "pages": 2, "from": 1, "to": 10,
        }


class TestExtractTags:
    def test_keywords_are_found_case_insensitively(self):
        assert extract_tags("The Prophet spoke about PRAYER and patience") == ["prayer", "pray", "prophet", "patience"]

    def test_empty_text(self):
        assert extract_tags("") == []
