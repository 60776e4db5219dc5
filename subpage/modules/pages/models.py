"""
Pages Models
============

Generic page record with a draft and a live stage.

The base columns live in `pages` / `pages_live`. A page subclass declares its
own `table_name` and `db` columns; those live in a joined table keyed by the
page id (`<table_name>` / `<table_name>_live`). write() saves the draft,
publish_recursive() copies the draft rows to the live stage.
"""

import re
import logging
from datetime import datetime

from subpage.core import Database, _t
from subpage.modules.forms import (
    FieldList, TabSet, Tab, TextField, CheckboxField, HtmlEditorField
)

logger = logging.getLogger(__name__)

BASE_TABLE = 'pages'
STAGES = ('draft', 'live')

# Column type -> sqlite declaration
COLUMN_TYPES = {
    'Varchar': 'VARCHAR(255)',
    'Text': 'TEXT',
    'HTMLText': 'TEXT',
    'Boolean': 'BOOLEAN DEFAULT 0',
    'Int': 'INTEGER DEFAULT 0',
}


def _db_log(level, message, details=None):
    """Log to framework's persistent DB logger"""
    try:
        from subpage.core import db_log
        db_log(level, 'pages', message, details)
    except Exception:
        pass


def to_boolean(value):
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def slugify(text):
    """Title -> URL segment: lower-case words joined with hyphens"""
    slug = re.sub(r'[^a-z0-9]+', '-', (text or '').lower()).strip('-')
    return slug or 'page'


def stage_table(table, stage='draft'):
    if stage not in STAGES:
        raise ValueError(f"Unknown stage {stage!r}")
    return table if stage == 'draft' else f'{table}_live'


class Page:
    """A CMS page. Subclasses add columns through `table_name` and `db`."""

    table_name = BASE_TABLE
    db = {
        'title': 'Varchar',
        'url_segment': 'Varchar',
        'show_in_menus': 'Boolean',
        'content': 'HTMLText',
    }
    defaults = {
        'show_in_menus': True,
    }
    singular_name = 'Page'
    plural_name = 'Pages'

    def __init__(self, **values):
        self.id = None
        self.version = 0
        self.created_at = None
        self.updated_at = None
        for name in self.columns():
            self.set_field(name, None)
        for name, value in self.all_defaults().items():
            self.set_field(name, value)
        for name, value in values.items():
            self.set_field(name, value)

    def __repr__(self):
        return f'<{type(self).__name__} #{self.id} {self.title!r}>'

    # ---- schema ----

    @classmethod
    def table_chain(cls):
        """[(table_name, columns)] from the base page down to this class"""
        chain = []
        for klass in reversed(cls.__mro__):
            if 'table_name' in vars(klass) and 'db' in vars(klass):
                chain.append((klass.table_name, dict(klass.db)))
        return chain

    @classmethod
    def columns(cls):
        result = {}
        for _table, columns in cls.table_chain():
            result.update(columns)
        return result

    @classmethod
    def all_defaults(cls):
        result = {}
        for klass in reversed(cls.__mro__):
            result.update(vars(klass).get('defaults', {}))
        return result

    @classmethod
    def init_tables(cls):
        """Create (or migrate) the draft and live tables of this page type"""
        db_path = Database.pages_db()
        try:
            with Database.connect(db_path) as conn:
                for table, columns in cls.table_chain():
                    for stage in STAGES:
                        name = stage_table(table, stage)
                        if table == BASE_TABLE:
                            id_column = ('id INTEGER PRIMARY KEY AUTOINCREMENT' if stage == 'draft'
                                         else 'id INTEGER PRIMARY KEY')
                            conn.execute(f'''
                                CREATE TABLE IF NOT EXISTS {name} (
                                    {id_column},
                                    class_name TEXT NOT NULL,
                                    version INTEGER DEFAULT 0,
                                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                                )
                            ''')
                        else:
                            conn.execute(f'CREATE TABLE IF NOT EXISTS {name} (id INTEGER PRIMARY KEY)')

                        added = Database.add_missing_columns(
                            conn, name, [(col, COLUMN_TYPES[col_type]) for col, col_type in columns.items()]
                        )
                        if added and table != BASE_TABLE:
                            logger.info(f"Migrated {name}: added {', '.join(added)}")

                    if table == BASE_TABLE:
                        conn.execute('CREATE INDEX IF NOT EXISTS idx_pages_class ON pages(class_name)')
                        conn.execute('CREATE INDEX IF NOT EXISTS idx_pages_url ON pages(url_segment)')
                conn.commit()
                logger.info(f"{cls.__name__} tables created/verified successfully")
        except Exception as e:
            logger.error(f"Error initializing {cls.__name__} tables: {e}")
            _db_log('error', f'Failed to init {cls.__name__} tables', {'error': str(e)})
            raise

    # ---- field access ----

    def get_field(self, name):
        """Raw stored value, bypassing any get_<name>() accessor"""
        return getattr(self, name)

    def set_field(self, name, value):
        column_type = self.columns().get(name)
        if column_type == 'Boolean':
            value = to_boolean(value) if value is not None else False
        elif column_type == 'Int':
            value = int(value or 0)
        elif column_type in ('Varchar', 'Text', 'HTMLText'):
            value = '' if value is None else str(value)
            if column_type == 'Varchar':
                value = value[:255]
        setattr(self, name, value)

    def to_dict(self):
        d = {'id': self.id, 'class_name': type(self).__name__, 'version': self.version,
             'created_at': self.created_at, 'updated_at': self.updated_at}
        for name in self.columns():
            d[name] = getattr(self, name)
        return d

    # ---- queries ----

    @classmethod
    def _select_sql(cls, stage):
        chain = cls.table_chain()
        select = ['t0.id', 't0.class_name', 't0.version', 't0.created_at', 't0.updated_at']
        joins = []
        aliases = {}
        for index, (table, columns) in enumerate(chain):
            alias = f't{index}'
            for column in columns:
                select.append(f'{alias}.{column}')
                aliases[column] = alias
            if index:
                joins.append(f'JOIN {stage_table(table, stage)} {alias} ON {alias}.id = t0.id')
        sql = f'SELECT {", ".join(select)} FROM {stage_table(BASE_TABLE, stage)} t0 {" ".join(joins)}'
        return sql, aliases

    @classmethod
    def _from_row(cls, row):
        page = cls.__new__(cls)
        page.id = row['id']
        page.version = row['version']
        page.created_at = row['created_at']
        page.updated_at = row['updated_at']
        for name in cls.columns():
            page.set_field(name, row[name])
        return page

    @classmethod
    def get_list(cls, stage='draft', **filters):
        """All pages of this type (subclasses: only their own class) matching filters"""
        sql, aliases = cls._select_sql(stage)
        where, params = [], []
        if cls.table_name != BASE_TABLE:
            where.append('t0.class_name = ?')
            params.append(cls.__name__)
        for name, value in filters.items():
            if name == 'id':
                where.append('t0.id = ?')
            elif name in aliases:
                where.append(f'{aliases[name]}.{name} = ?')
            else:
                raise ValueError(f"Unknown field {name!r} for {cls.__name__}")
            params.append(value)
        if where:
            sql += ' WHERE ' + ' AND '.join(where)
        sql += ' ORDER BY t0.id'

        try:
            with Database.connect(Database.pages_db()) as conn:
                return [cls._from_row(row) for row in conn.execute(sql, params).fetchall()]
        except Exception as e:
            logger.error(f"Error listing {cls.__name__}: {e}")
            _db_log('error', f'Error listing {cls.__name__}', {'error': str(e)})
            return []

    @classmethod
    def get_one(cls, stage='draft', **filters):
        pages = cls.get_list(stage=stage, **filters)
        return pages[0] if pages else None

    @classmethod
    def get_by_id(cls, page_id, stage='draft'):
        return cls.get_one(stage=stage, id=page_id)

    @classmethod
    def get_by_url_segment(cls, url_segment, stage='live'):
        return cls.get_one(stage=stage, url_segment=url_segment)

    @classmethod
    def count(cls, stage='draft'):
        sql = f'SELECT COUNT(*) FROM {stage_table(BASE_TABLE, stage)}'
        params = ()
        if cls.table_name != BASE_TABLE:
            sql += ' WHERE class_name = ?'
            params = (cls.__name__,)
        with Database.connect(Database.pages_db()) as conn:
            return conn.execute(sql, params).fetchone()[0]

    # ---- persistence ----

    def _unique_url_segment(self, conn):
        base = slugify(self.url_segment or self.title)
        candidate, suffix = base, 2
        while conn.execute(
            f'SELECT 1 FROM {BASE_TABLE} WHERE url_segment = ? AND id IS NOT ?',
            (candidate, self.id)
        ).fetchone():
            candidate = f'{base}-{suffix}'
            suffix += 1
        return candidate

    def write(self):
        """Insert or update the draft record. Returns the page id."""
        now = datetime.now().isoformat()
        try:
            with Database.connect(Database.pages_db()) as conn:
                self.url_segment = self._unique_url_segment(conn)
                for table, columns in self.table_chain():
                    names = list(columns)
                    values = [getattr(self, name) for name in names]
                    if table == BASE_TABLE:
                        if self.id is None:
                            cursor = conn.execute(f'''
                                INSERT INTO {BASE_TABLE}
                                (class_name, version, created_at, updated_at, {", ".join(names)})
                                VALUES (?, 1, ?, ?, {", ".join("?" for _ in names)})
                            ''', [type(self).__name__, now, now] + values)
                            self.id = cursor.lastrowid
                            self.created_at = now
                            self.version = 1
                        else:
                            conn.execute(f'''
                                UPDATE {BASE_TABLE}
                                SET {", ".join(f"{name} = ?" for name in names)},
                                    version = version + 1, updated_at = ?
                                WHERE id = ?
                            ''', values + [now, self.id])
                            self.version += 1
                        self.updated_at = now
                    else:
                        conn.execute(f'''
                            INSERT OR REPLACE INTO {table} (id, {", ".join(names)})
                            VALUES (?, {", ".join("?" for _ in names)})
                        ''', [self.id] + values)
                conn.commit()
            logger.info(f"Saved {type(self).__name__} {self.id}: {self.title}")
            return self.id
        except Exception as e:
            logger.error(f"Error saving {type(self).__name__}: {e}")
            _db_log('error', f'Error saving {type(self).__name__}', {'error': str(e), 'id': self.id})
            raise

    def publish_recursive(self):
        """Copy this page's draft rows (base and subclass tables) to the live stage"""
        if self.id is None:
            self.write()
        try:
            with Database.connect(Database.pages_db()) as conn:
                for table, _columns in self.table_chain():
                    columns = ', '.join(Database.table_columns(conn, table))
                    conn.execute(f'''
                        INSERT OR REPLACE INTO {stage_table(table, "live")} ({columns})
                        SELECT {columns} FROM {table} WHERE id = ?
                    ''', (self.id,))
                conn.commit()
            logger.info(f"Published {type(self).__name__} {self.id}")
            _db_log('info', f'Published {type(self).__name__}', {'id': self.id, 'version': self.version})
            return True
        except Exception as e:
            logger.error(f"Error publishing {type(self).__name__} {self.id}: {e}")
            _db_log('error', f'Error publishing {type(self).__name__}', {'error': str(e), 'id': self.id})
            raise

    def is_published(self):
        if self.id is None:
            return False
        with Database.connect(Database.pages_db()) as conn:
            row = conn.execute(
                f'SELECT 1 FROM {stage_table(BASE_TABLE, "live")} WHERE id = ?', (self.id,)
            ).fetchone()
            return row is not None

    # ---- hooks ----

    @classmethod
    def require_default_records(cls):
        """Called on setup; page types create their default content here"""
        return None

    def get_cms_fields(self):
        """The editing form: a Root tab set with the Main tab"""
        return FieldList(
            TabSet(
                'Root',
                Tab(
                    'Main', _t('Page.MAIN', 'Main'),
                    TextField('title', _t('Page.TITLE', 'Page name')),
                    TextField('url_segment', _t('Page.URLSEGMENT', 'URL segment')),
                    CheckboxField('show_in_menus', _t('Page.SHOWINMENUS', 'Show in menus?')),
                    HtmlEditorField('content', _t('Page.CONTENT', 'Content')),
                )
            )
        )
