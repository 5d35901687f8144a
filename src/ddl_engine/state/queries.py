"""
Catalog queries used by the model reader.

Every query uses `?` placeholders (connections rewrite them for their driver)
and aliases its result columns to the canonical lower-case names the reader
expects:

- list_tables:   table_name, table_schema, table_type, remarks, optional table_catalog
                 params: (schema_pattern, table_pattern)
- list_columns:  column_name, data_type, size, precision, scale, is_nullable,
                 column_default, is_auto_increment, ordinal_position, remarks
                 params: (schema, table)
- primary_key:   constraint_name, column_name, ordinal_position
                 params: (schema, table)
- foreign_keys:  constraint_name, column_name, foreign_table_name,
                 foreign_column_name, ordinal_position, delete_rule, update_rule
                 params: (schema, table)
- indexes:       index_name, column_name, non_unique, ordinal_position
                 params: (schema, table); None when the vendor exposes no index catalog
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogQueries:
    """SQL templates for reading one vendor's catalog."""

    list_tables: str
    list_columns: str
    primary_key: str
    foreign_keys: str
    indexes: str | None = None


_INFORMATION_SCHEMA_TABLES = """
  SELECT t.table_name    AS table_name,
         t.table_schema  AS table_schema,
         t.table_catalog AS table_catalog,
         t.table_type    AS table_type,
         NULL            AS remarks
  FROM information_schema.tables AS t
  WHERE t.table_schema LIKE ?
    AND t.table_name LIKE ?
  ORDER BY t.table_name
"""

_INFORMATION_SCHEMA_COLUMNS = """
  SELECT c.column_name              AS column_name,
         c.data_type                AS data_type,
         c.character_maximum_length AS size,
         c.numeric_precision        AS precision,
         c.numeric_scale            AS scale,
         c.is_nullable              AS is_nullable,
         c.column_default           AS column_default,
         c.is_identity              AS is_auto_increment,
         c.ordinal_position         AS ordinal_position,
         NULL                       AS remarks
  FROM information_schema.columns AS c
  WHERE c.table_schema = ?
    AND c.table_name = ?
  ORDER BY c.ordinal_position
"""

_INFORMATION_SCHEMA_PRIMARY_KEY = """
  SELECT tc.constraint_name   AS constraint_name,
         kcu.column_name      AS column_name,
         kcu.ordinal_position AS ordinal_position
  FROM information_schema.table_constraints AS tc
  JOIN information_schema.key_column_usage AS kcu
    ON  tc.constraint_schema = kcu.constraint_schema
    AND tc.constraint_name   = kcu.constraint_name
    AND tc.table_name        = kcu.table_name
  WHERE tc.constraint_type = 'PRIMARY KEY'
    AND tc.table_schema = ?
    AND tc.table_name = ?
  ORDER BY kcu.ordinal_position
"""

_INFORMATION_SCHEMA_FOREIGN_KEYS = """
  SELECT rc.constraint_name   AS constraint_name,
         kcu.column_name      AS column_name,
         ref.table_name       AS foreign_table_name,
         ref.column_name      AS foreign_column_name,
         kcu.ordinal_position AS ordinal_position,
         rc.delete_rule       AS delete_rule,
         rc.update_rule       AS update_rule
  FROM information_schema.referential_constraints AS rc
  JOIN information_schema.key_column_usage AS kcu
    ON  rc.constraint_schema = kcu.constraint_schema
    AND rc.constraint_name   = kcu.constraint_name
  JOIN information_schema.key_column_usage AS ref
    ON  rc.unique_constraint_schema = ref.constraint_schema
    AND rc.unique_constraint_name   = ref.constraint_name
    AND kcu.position_in_unique_constraint = ref.ordinal_position
  WHERE kcu.table_schema = ?
    AND kcu.table_name = ?
  ORDER BY rc.constraint_name, kcu.ordinal_position
"""

INFORMATION_SCHEMA_QUERIES = CatalogQueries(
    list_tables=_INFORMATION_SCHEMA_TABLES,
    list_columns=_INFORMATION_SCHEMA_COLUMNS,
    primary_key=_INFORMATION_SCHEMA_PRIMARY_KEY,
    foreign_keys=_INFORMATION_SCHEMA_FOREIGN_KEYS,
)


# ---------- vendor index catalogs ----------

POSTGRESQL_INDEXES = """
  SELECT i.relname                        AS index_name,
         a.attname                        AS column_name,
         CASE WHEN ix.indisunique THEN 0 ELSE 1 END AS non_unique,
         array_position(ix.indkey, a.attnum) AS ordinal_position
  FROM pg_index AS ix
  JOIN pg_class AS t ON t.oid = ix.indrelid
  JOIN pg_class AS i ON i.oid = ix.indexrelid
  JOIN pg_namespace AS n ON n.oid = t.relnamespace
  JOIN pg_attribute AS a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey)
  WHERE NOT ix.indisprimary
    AND n.nspname = ?
    AND t.relname = ?
  ORDER BY i.relname, ordinal_position
"""

MYSQL_COLUMNS = """
  SELECT c.column_name              AS column_name,
         c.data_type                AS data_type,
         c.character_maximum_length AS size,
         c.numeric_precision        AS precision,
         c.numeric_scale            AS scale,
         c.is_nullable              AS is_nullable,
         c.column_default           AS column_default,
         CASE WHEN c.extra LIKE '%auto_increment%' THEN 'YES' ELSE 'NO' END AS is_auto_increment,
         c.ordinal_position         AS ordinal_position,
         c.column_comment           AS remarks
  FROM information_schema.columns AS c
  WHERE c.table_schema = ?
    AND c.table_name = ?
  ORDER BY c.ordinal_position
"""

MYSQL_INDEXES = """
  SELECT s.index_name   AS index_name,
         s.column_name  AS column_name,
         s.non_unique   AS non_unique,
         s.seq_in_index AS ordinal_position
  FROM information_schema.statistics AS s
  WHERE s.index_name <> 'PRIMARY'
    AND s.table_schema = ?
    AND s.table_name = ?
  ORDER BY s.index_name, s.seq_in_index
"""

ORACLE_QUERIES = CatalogQueries(
    list_tables="""
  SELECT t.table_name AS table_name,
         t.owner      AS table_schema,
         'TABLE'      AS table_type,
         c.comments   AS remarks
  FROM all_tables t
  LEFT JOIN all_tab_comments c
    ON c.owner = t.owner AND c.table_name = t.table_name
  WHERE t.owner LIKE ?
    AND t.table_name LIKE ?
  ORDER BY t.table_name
""",
    list_columns="""
  SELECT c.column_name    AS column_name,
         c.data_type      AS data_type,
         c.char_length    AS "SIZE",
         c.data_precision AS "PRECISION",
         c.data_scale     AS scale,
         CASE WHEN c.nullable = 'Y' THEN 'YES' ELSE 'NO' END AS is_nullable,
         c.data_default   AS column_default,
         'NO'             AS is_auto_increment,
         c.column_id      AS ordinal_position,
         NULL             AS remarks
  FROM all_tab_columns c
  WHERE c.owner = ?
    AND c.table_name = ?
  ORDER BY c.column_id
""",
    primary_key="""
  SELECT ac.constraint_name AS constraint_name,
         cc.column_name     AS column_name,
         cc.position        AS ordinal_position
  FROM all_constraints ac
  JOIN all_cons_columns cc
    ON cc.owner = ac.owner AND cc.constraint_name = ac.constraint_name
  WHERE ac.constraint_type = 'P'
    AND ac.owner = ?
    AND ac.table_name = ?
  ORDER BY cc.position
""",
    foreign_keys="""
  SELECT ac.constraint_name AS constraint_name,
         cc.column_name     AS column_name,
         rc.table_name      AS foreign_table_name,
         rc.column_name     AS foreign_column_name,
         cc.position        AS ordinal_position,
         ac.delete_rule     AS delete_rule,
         'NO ACTION'        AS update_rule
  FROM all_constraints ac
  JOIN all_cons_columns cc
    ON cc.owner = ac.owner AND cc.constraint_name = ac.constraint_name
  JOIN all_cons_columns rc
    ON rc.owner = ac.r_owner AND rc.constraint_name = ac.r_constraint_name
   AND rc.position = cc.position
  WHERE ac.constraint_type = 'R'
    AND ac.owner = ?
    AND ac.table_name = ?
  ORDER BY ac.constraint_name, cc.position
""",
    indexes="""
  SELECT ic.index_name      AS index_name,
         ic.column_name     AS column_name,
         CASE WHEN i.uniqueness = 'UNIQUE' THEN 0 ELSE 1 END AS non_unique,
         ic.column_position AS ordinal_position
  FROM all_ind_columns ic
  JOIN all_indexes i
    ON i.owner = ic.index_owner AND i.index_name = ic.index_name
  WHERE ic.table_owner = ?
    AND ic.table_name = ?
  ORDER BY ic.index_name, ic.column_position
""",
)

# Oracle 10 keeps dropped-but-not-purged tables in the recycle bin.
ORACLE_RECYCLE_BIN = "SELECT * FROM RECYCLEBIN WHERE OBJECT_NAME = ?"

SAPDB_QUERIES = CatalogQueries(
    list_tables="""
  SELECT tablename AS table_name,
         owner     AS table_schema,
         type      AS table_type,
         NULL      AS remarks
  FROM domain.tables
  WHERE owner LIKE ?
    AND tablename LIKE ?
  ORDER BY tablename
""",
    list_columns="""
  SELECT columnname AS column_name,
         datatype   AS data_type,
         len        AS "SIZE",
         len        AS "PRECISION",
         dec        AS scale,
         nullable   AS is_nullable,
         "DEFAULT"  AS column_default,
         CASE WHEN "DEFAULT" LIKE 'DEFAULT SERIAL%' THEN 'YES' ELSE 'NO' END AS is_auto_increment,
         pos        AS ordinal_position,
         comment    AS remarks
  FROM domain.columns
  WHERE owner = ?
    AND tablename = ?
  ORDER BY pos
""",
    primary_key="""
  SELECT 'PRIMARY'  AS constraint_name,
         columnname AS column_name,
         keypos     AS ordinal_position
  FROM domain.columns
  WHERE mode = 'KEY'
    AND owner = ?
    AND tablename = ?
  ORDER BY keypos
""",
    foreign_keys="""
  SELECT fkeyname       AS constraint_name,
         columnname     AS column_name,
         reftablename   AS foreign_table_name,
         refcolumnname  AS foreign_column_name,
         pos            AS ordinal_position,
         rule           AS delete_rule,
         'NO ACTION'    AS update_rule
  FROM domain.foreignkeycolumns
  WHERE owner = ?
    AND tablename = ?
  ORDER BY fkeyname, pos
""",
    indexes="""
  SELECT indexname  AS index_name,
         columnname AS column_name,
         CASE WHEN type = 'UNIQUE' THEN 0 ELSE 1 END AS non_unique,
         columnno   AS ordinal_position
  FROM domain.indexcolumns
  WHERE owner = ?
    AND tablename = ?
  ORDER BY indexname, columnno
""",
)
