# pawpal/api/posts/schemas.py
from marshmallow import Schema, fields, validate


class PostCreateSchema(Schema):
    """POST /api/posts/ 게시글 작성 요청"""
    content = fields.Str(required=True, validate=validate.Length(max=2000))
    pet_id = fields.Str(load_default=None)
    image = fields.Str(load_default=None)


class FeedQuerySchema(Schema):
    limit = fields.Int(load_default=20, validate=validate.Range(min=1, max=50))
    cursor = fields.Str(load_default=None)


class CommentCreateSchema(Schema):
    text = fields.Str(required=True, validate=validate.Length(max=1000))


class PostResponseSchema(Schema):
    id = fields.Str()
    user_id = fields.Str()
    user = fields.Str()
    avatar = fields.Str(allow_none=True)
    pet_name = fields.Str()
    pet_type = fields.Str()
    pet_species = fields.Str()
    content = fields.Str()
    image = fields.Str(allow_none=True)
    likes = fields.Int()
    comments = fields.Int()
    created_at = fields.DateTime(allow_none=True)


class CommentResponseSchema(Schema):
    id = fields.Str()
    user_id = fields.Str()
    user_name = fields.Str()
    user_avatar = fields.Str(allow_none=True)
    text = fields.Str()
    created_at = fields.DateTime(allow_none=True)
