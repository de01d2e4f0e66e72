import pytest

from tests.payloads import MESSAGE, QUICK_REPLY, REQUIRED_FIELDS, VALID_PARAMS
from works_gateway.messaging.application.content_builders import CONTENT_BUILDERS, build_envelope
from works_gateway.messaging.domain.value_objects import MessageType
from works_gateway.shared.exceptions import ValidationError


def test_every_message_type_has_a_builder():
    assert set(CONTENT_BUILDERS) == set(MessageType)


@pytest.mark.parametrize("message_type", list(MessageType))
def test_valid_params_build_typed_envelope(message_type):
    envelope = build_envelope(message_type, VALID_PARAMS[message_type])
    assert envelope["content"]["type"] == message_type.value
    assert "quickReply" not in envelope["content"]


@pytest.mark.parametrize("message_type,field,expected", REQUIRED_FIELDS)
def test_missing_required_field_names_the_field(message_type, field, expected):
    params = {k: v for k, v in VALID_PARAMS[message_type].items() if k != field}
    with pytest.raises(ValidationError) as ei:
        build_envelope(message_type, params)
    assert expected in ei.value.message


def test_quick_reply_is_validated_and_attached():
    envelope = build_envelope(MessageType.TEXT, {"text": "hi", "quickReply": QUICK_REPLY})
    assert envelope == {"content": {"type": "text", "text": "hi", "quickReply": QUICK_REPLY}}

    with pytest.raises(ValidationError, match="quickReply"):
        build_envelope(MessageType.TEXT, {"text": "hi", "quickReply": {"items": []}})


def test_text_is_limited_to_2000_chars():
    build_envelope(MessageType.TEXT, {"text": "a" * 2000})
    with pytest.raises(ValidationError, match="2000"):
        build_envelope(MessageType.TEXT, {"text": "a" * 2001})


def test_image_omits_absent_fields_and_checks_urls():
    envelope = build_envelope(MessageType.IMAGE, {"originalContentUrl": "https://cdn.example.com/a.jpg"})
    assert envelope["content"] == {"type": "image", "originalContentUrl": "https://cdn.example.com/a.jpg"}

    with pytest.raises(ValidationError, match="previewImageUrl"):
        build_envelope(MessageType.IMAGE, {"fileId": "f1", "previewImageUrl": "http://cdn.example.com/a.jpg"})


def test_file_accepts_http_url_but_not_ftp():
    build_envelope(MessageType.FILE, {"originalContentUrl": "http://files.example.com/a.zip"})
    with pytest.raises(ValidationError):
        build_envelope(MessageType.FILE, {"originalContentUrl": "ftp://files.example.com/a.zip"})


def test_link_fields_are_bounded():
    params = dict(VALID_PARAMS[MessageType.LINK], linkText="a" * 1001)
    with pytest.raises(ValidationError, match="linkText"):
        build_envelope(MessageType.LINK, params)


def test_button_template_validates_each_action():
    with pytest.raises(ValidationError, match=r"actions\[1\]"):
        build_envelope(MessageType.BUTTON_TEMPLATE, {"contentText": "Pick", "actions": [MESSAGE, {"type": "uri", "label": "x"}]})


class TestListTemplate:
    def test_full_payload(self):
        params = {
            "coverData": {"backgroundImageUrl": "https://cdn.example.com/cover.png"},
            "elements": [{
                "title": "Row",
                "subtitle": "Sub",
                "originalContentUrl": "https://cdn.example.com/row.png",
                "action": MESSAGE,
                "defaultAction": {"type": "uri", "uri": "https://example.com"},
            }],
            "actions": [[MESSAGE, MESSAGE]],
            "quickReply": QUICK_REPLY,
        }
        content = build_envelope(MessageType.LIST_TEMPLATE, params)["content"]
        assert content["coverData"] == params["coverData"]
        assert content["actions"] == params["actions"]
        assert content["quickReply"] == QUICK_REPLY

    def test_at_most_ten_elements(self):
        build_envelope(MessageType.LIST_TEMPLATE, {"elements": [{"title": "t"}] * 10})
        with pytest.raises(ValidationError, match="at most 10"):
            build_envelope(MessageType.LIST_TEMPLATE, {"elements": [{"title": "t"}] * 11})

    def test_element_requires_title(self):
        with pytest.raises(ValidationError, match=r"elements\[0\]\.title"):
            build_envelope(MessageType.LIST_TEMPLATE, {"elements": [{"subtitle": "s"}]})

    def test_cover_image_and_file_are_exclusive(self):
        cover = {"backgroundImageUrl": "https://cdn.example.com/c.png", "backgroundFileId": "f1"}
        with pytest.raises(ValidationError, match="only one"):
            build_envelope(MessageType.LIST_TEMPLATE, {"elements": [{"title": "t"}], "coverData": cover})

    def test_global_actions_must_be_a_grid(self):
        with pytest.raises(ValidationError):
            build_envelope(MessageType.LIST_TEMPLATE, {"elements": [{"title": "t"}], "actions": [MESSAGE]})

    def test_subtitle_limit(self):
        with pytest.raises(ValidationError, match="subtitle"):
            build_envelope(MessageType.LIST_TEMPLATE, {"elements": [{"title": "t", "subtitle": "s" * 1001}]})


class TestCarousel:
    def test_defaults_aspect_ratio_and_size(self):
        content = build_envelope(MessageType.CAROUSEL, VALID_PARAMS[MessageType.CAROUSEL])["content"]
        assert content["imageAspectRatio"] == "rectangle"
        assert content["imageSize"] == "cover"

    def test_keeps_explicit_aspect_ratio_and_size(self):
        params = dict(VALID_PARAMS[MessageType.CAROUSEL], imageAspectRatio="square", imageSize="contain")
        content = build_envelope(MessageType.CAROUSEL, params)["content"]
        assert (content["imageAspectRatio"], content["imageSize"]) == ("square", "contain")

    def test_column_with_file_id_only_passes(self):
        build_envelope(MessageType.CAROUSEL, {"columns": [{"fileId": "f1", "text": "t", "actions": []}]})

    def test_column_without_image_source_fails(self):
        with pytest.raises(ValidationError, match="originalContentUrl"):
            build_envelope(MessageType.CAROUSEL, {"columns": [{"text": "t", "actions": []}]})

    def test_column_actions_must_be_list(self):
        with pytest.raises(ValidationError, match=r"columns\[0\]\.actions"):
            build_envelope(MessageType.CAROUSEL, {"columns": [{"fileId": "f1", "text": "t"}]})

    def test_default_action_does_not_need_label(self):
        column = {"fileId": "f1", "text": "t", "actions": [MESSAGE], "defaultAction": {"type": "message"}}
        build_envelope(MessageType.CAROUSEL, {"columns": [column]})

    def test_at_most_ten_columns(self):
        column = {"fileId": "f1", "text": "t", "actions": []}
        with pytest.raises(ValidationError):
            build_envelope(MessageType.CAROUSEL, {"columns": [column] * 11})


class TestImageCarousel:
    def test_column_with_file_id_passes(self):
        build_envelope(MessageType.IMAGE_CAROUSEL, {"columns": [{"fileId": "f1", "action": MESSAGE}]})

    def test_column_requires_image_source(self):
        with pytest.raises(ValidationError, match="fileId"):
            build_envelope(MessageType.IMAGE_CAROUSEL, {"columns": [{"action": MESSAGE}]})

    def test_column_image_must_be_https(self):
        with pytest.raises(ValidationError, match="HTTPS"):
            build_envelope(MessageType.IMAGE_CAROUSEL, {"columns": [{"originalContentUrl": "http://cdn.example.com/a.png"}]})

    def test_column_action_is_validated(self):
        with pytest.raises(ValidationError, match="label"):
            build_envelope(MessageType.IMAGE_CAROUSEL, {"columns": [{"fileId": "f1", "action": {"type": "message"}}]})


def test_flex_alt_text_limit_and_contents_shape():
    with pytest.raises(ValidationError, match="400"):
        build_envelope(MessageType.FLEX, {"altText": "a" * 401, "contents": {"type": "bubble"}})
    with pytest.raises(ValidationError, match="contents"):
        build_envelope(MessageType.FLEX, {"altText": "Alt", "contents": "bubble"})


def test_button_and_carousel_actions_must_be_objects():
    with pytest.raises(ValidationError, match=r"'actions\[0\]' must be an object"):
        build_envelope(MessageType.BUTTON_TEMPLATE, {"contentText": "Pick", "actions": [[MESSAGE]]})

    column = {"fileId": "f1", "text": "t", "actions": [[MESSAGE]]}
    with pytest.raises(ValidationError, match=r"columns\[0\]\.actions\[0\]"):
        build_envelope(MessageType.CAROUSEL, {"columns": [column]})
