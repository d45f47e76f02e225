import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

import variables as var


START = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


def _comparable(value):
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class Response:
    def __init__(self, data):
        self.data = data


class Query:
    """The slice of the postgrest builder the app uses, over plain dicts."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.ordering = None
        self.max_rows = None

    # actions
    def select(self, columns="*"):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=""):
        self.action, self.payload = "upsert", payload
        self.on_conflict = [c for c in on_conflict.split(",") if c]
        return self

    def delete(self):
        self.action = "delete"
        return self

    # filters
    def _filter(self, fn):
        self.filters.append(fn)
        return self

    def eq(self, col, value):
        return self._filter(lambda r: r.get(col) == value)

    def neq(self, col, value):
        return self._filter(lambda r: r.get(col) != value)

    def in_(self, col, values):
        values = list(values)
        return self._filter(lambda r: r.get(col) in values)

    def gt(self, col, value):
        return self._filter(lambda r: r.get(col) is not None and _comparable(r[col]) > _comparable(value))

    def gte(self, col, value):
        return self._filter(lambda r: r.get(col) is not None and _comparable(r[col]) >= _comparable(value))

    def lt(self, col, value):
        return self._filter(lambda r: r.get(col) is not None and _comparable(r[col]) < _comparable(value))

    def lte(self, col, value):
        return self._filter(lambda r: r.get(col) is not None and _comparable(r[col]) <= _comparable(value))

    def order(self, col, desc=False):
        self.ordering = (col, desc)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def _matches(self):
        return [r for r in self.db.rows(self.table) if all(f(r) for f in self.filters)]

    def execute(self):
        rows = self.db.rows(self.table)

        if self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.new_row(self.table, p) for p in payload]
            return Response(copy.deepcopy(inserted))

        if self.action == "upsert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            out = []
            for p in payload:
                existing = next(
                    (r for r in rows if all(r.get(c) == p.get(c) for c in self.on_conflict)),
                    None,
                )
                if existing is not None:
                    existing.update(copy.deepcopy(p))
                    out.append(existing)
                else:
                    out.append(self.db.new_row(self.table, p))
            return Response(copy.deepcopy(out))

        matched = self._matches()

        if self.action == "update":
            for r in matched:
                r.update(copy.deepcopy(self.payload))
            return Response(copy.deepcopy(matched))

        if self.action == "delete":
            ids = {id(r) for r in matched}
            self.db.tables[self.table] = [r for r in rows if id(r) not in ids]
            return Response(copy.deepcopy(matched))

        if self.ordering:
            col, desc = self.ordering
            matched = sorted(matched, key=lambda r: _comparable(r.get(col)), reverse=desc)
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return Response(copy.deepcopy(matched))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, data, file_options=None):
        self.storage.files[(self.name, path)] = data
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        for p in paths:
            self.storage.files.pop((self.name, p), None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.files = {}

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeAdmin:
    def __init__(self):
        self.users = []

    def create_user(self, attrs):
        user = SimpleNamespace(id=str(uuid.uuid4()), email=attrs.get("email"), phone=None)
        self.users.append(user)
        return SimpleNamespace(user=user)

    def list_users(self):
        return list(self.users)

    def delete_user(self, user_id):
        self.users = [u for u in self.users if u.id != user_id]


class FakeSupabase:
    """In-memory stand-in for a supabase Client."""

    def __init__(self):
        self.tables = {}
        self.clock = START
        self.storage = FakeStorage()
        self.auth = SimpleNamespace(admin=FakeAdmin())

    def table(self, name):
        return Query(self, name)

    def rows(self, name):
        return self.tables.setdefault(name, [])

    def tick(self, seconds=1):
        self.clock += timedelta(seconds=seconds)
        return self.clock

    def new_row(self, name, payload):
        row = copy.deepcopy(payload)
        row.setdefault(var.col_id, str(uuid.uuid4()))
        row.setdefault(var.col_created_at, self.tick().isoformat())
        self.rows(name).append(row)
        return row

    # helpers for arranging test data
    def add_profile(self, name="Anna", gender="female", looking_for="male", is_bot=False, **extra):
        return self.new_row(var.table_profiles, {
            var.col_name: name,
            var.col_age: 30,
            var.col_city: "Moscow",
            var.col_gender: gender,
            var.col_looking_for: looking_for,
            var.col_about_me: "I like long walks and good books.",
            var.col_is_bot: is_bot,
            **extra,
        })

    def add_message(self, conversation_id, sender_id, content="hello"):
        return self.new_row(var.table_messages, {
            var.col_conversation_id: conversation_id,
            var.col_sender_id: sender_id,
            var.col_content: content,
        })


class FakeLLM:
    def __init__(self, reply="Hi! How is your day going?"):
        self.reply = reply
        self.prompts = []
        self.images = []

    def complete(self, messages):
        self.prompts.append(messages)
        return self.reply

    def generate_image(self, prompt, size="1024x1024"):
        self.images.append(prompt)
        return b"\x89PNG fake"


class FailingLLM(FakeLLM):
    def complete(self, messages):
        raise RuntimeError("upstream 503")

    def generate_image(self, prompt, size="1024x1024"):
        raise RuntimeError("rate limited")


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def man(db):
    return db.add_profile(name="Ivan", gender="male", looking_for="female")


@pytest.fixture
def woman(db):
    return db.add_profile(name="Anna", gender="female", looking_for="male")


@pytest.fixture
def bot(db):
    return db.add_profile(name="Maria", gender="female", looking_for="male", is_bot=True,
                          values="Honesty and kindness")


@pytest.fixture
def failing_llm():
    return FailingLLM()


@pytest.fixture
def silent_llm():
    return FakeLLM(reply=None)
