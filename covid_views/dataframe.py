from typing import List, Dict, Any, Tuple, Optional, Iterable, Union, Mapping

from covid_views.errors import JoinKeyCollision


class GroupBy:
    def __init__(self, df: 'DataFrame', keys: List[str]):
        if not keys:
            raise ValueError("Must provide at least one key for grouping.")

        missing = [k for k in keys if k not in df.columns]
        if missing:
            raise KeyError(f"GroupBy keys not found: {missing}. Available: {df.columns}")

        self.df = df
        self.keys = keys
        # key tuple -> row indices, in first-seen order
        self.groups: Dict[Tuple[Any, ...], List[int]] = {}

        key_cols = [df._data[k] for k in keys]
        for i in range(df._num_rows):
            kt = tuple(col[i] for col in key_cols)
            self.groups.setdefault(kt, []).append(i)

    def agg(self, spec: Dict[str, List[str]]) -> 'DataFrame':
        out_cols = {k: [] for k in self.keys}
        agg_cols = {}

        for val_col, funs in spec.items():
            for fn in funs:
                agg_cols[f"{fn}_{val_col}"] = []

        for kt, idxs in self.groups.items():
            for j, k in enumerate(self.keys):
                out_cols[k].append(kt[j])

            for val_col, funs in spec.items():
                if val_col not in self.df._data:
                    for fn in funs:
                        agg_cols[f"{fn}_{val_col}"].append(None)
                    continue

                vals = [self.df._data[val_col][i] for i in idxs]
                nums = [v for v in vals if isinstance(v, (int, float)) and not isinstance(v, bool)]

                for fn in funs:
                    col_name = f"{fn}_{val_col}"

                    if fn == 'count':
                        agg_cols[col_name].append(len(idxs))
                    elif not nums:
                        agg_cols[col_name].append(None)
                    elif fn == 'sum':
                        agg_cols[col_name].append(sum(nums))
                    elif fn == 'avg':
                        agg_cols[col_name].append(sum(nums) / len(nums))
                    elif fn == 'min':
                        agg_cols[col_name].append(min(nums))
                    elif fn == 'max':
                        agg_cols[col_name].append(max(nums))
                    else:
                        raise ValueError(f"Unsupported aggregation function: {fn}")

        out_cols.update(agg_cols)
        return DataFrame(out_cols)


class DataFrame:
    def __init__(self, data: Dict[str, List[Any]]):
        if not isinstance(data, dict):
            raise TypeError(f"Input must be a dictionary, got {type(data).__name__}")

        self._data = data
        self._length = len(next(iter(data.values()))) if data else 0
        self._num_rows = self._length
        self._num_cols = len(self._data) if self._data else 0

        if data:
            if not all(isinstance(v, list) for v in data.values()):
                raise TypeError("Input data must be a dictionary of lists.")
            if not all(len(v) == self._length for v in data.values()):
                raise ValueError(f"All lists must have the same length. Found lengths: {[len(v) for v in data.values()]}")

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]], columns: List[str]) -> 'DataFrame':
        data = {c: [] for c in columns}
        for row in rows:
            for c in columns:
                data[c].append(row.get(c))
        return cls(data)

    @classmethod
    def empty(cls, columns: List[str]) -> 'DataFrame':
        return cls({c: [] for c in columns})

    @property
    def columns(self) -> List[str]:
        return list(self._data.keys())

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"<DataFrame: {self._num_rows:,} rows x {self._num_cols} columns>"

    def __getitem__(self, item):
        if isinstance(item, str):
            if item in self._data:
                return self._data[item]
            raise KeyError(f"Column '{item}' not found")
        raise TypeError("Invalid argument type. Use a column name string.")

    def rows(self) -> List[Dict[str, Any]]:
        cols = self.columns
        return [{c: self._data[c][i] for c in cols} for i in range(self._length)]

    def take(self, indices: List[int]) -> 'DataFrame':
        return DataFrame({col: [vals[i] for i in indices] for col, vals in self._data.items()})

    def select(self, columns: List[str]) -> 'DataFrame':
        if not isinstance(columns, list):
            raise TypeError(f"columns must be a list, got {type(columns).__name__}")
        if len(columns) == 0:
            raise ValueError("Cannot select zero columns. Provide at least one column name.")

        missing = [c for c in columns if c not in self._data]
        if missing:
            raise KeyError(f"Columns {missing} not found. Available columns: {self.columns}")

        return DataFrame({c: self._data[c][:] for c in columns})

    def rename(self, mapping: Dict[str, str]) -> 'DataFrame':
        return DataFrame({mapping.get(c, c): vals for c, vals in self._data.items()})

    def with_column(self, name: str, values: List[Any]) -> 'DataFrame':
        if len(values) != self._length:
            raise ValueError(
                f"Column '{name}' has {len(values)} values, DataFrame has {self._length} rows."
            )
        new_data = dict(self._data)
        new_data[name] = list(values)
        return DataFrame(new_data)

    def filter(self, condition: List[bool]) -> 'DataFrame':
        if not isinstance(condition, list):
            raise TypeError(f"condition must be a list, got {type(condition).__name__}")

        if len(condition) != self._length:
            raise ValueError(
                f"Condition list length ({len(condition)}) must match DataFrame length ({self._length})."
            )

        return self.take([i for i, c in enumerate(condition) if c])

    def sort_values(self, by: Union[str, List[str]], ascending: bool = True) -> 'DataFrame':
        """
        Stable sort on one or more columns. Missing values go last in
        either direction, rows with equal keys keep their relative order.
        """
        keys = [by] if isinstance(by, str) else list(by)
        for k in keys:
            if k not in self._data:
                raise ValueError(f"Column '{k}' not found.")

        indices = list(range(self._length))
        # least significant key first; each pass is stable
        for k in reversed(keys):
            col = self._data[k]
            if ascending:
                indices.sort(key=lambda i: (col[i] is None, 0 if col[i] is None else col[i]))
            else:
                indices.sort(key=lambda i: (col[i] is not None, 0 if col[i] is None else col[i]), reverse=True)

        return self.take(indices)

    def groupby(self, keys: Union[str, List[str]]) -> 'GroupBy':
        if isinstance(keys, str):
            keys = [keys]
        elif not isinstance(keys, list):
            raise TypeError(f"keys must be a string or list, got {type(keys).__name__}")

        if len(keys) == 0:
            raise ValueError("Must provide at least one column to group by.")

        missing_keys = [k for k in keys if k not in self.columns]
        if missing_keys:
            raise ValueError(
                f"GroupBy keys not found in DataFrame: {missing_keys}. "
                f"Available columns: {self.columns}"
            )

        return GroupBy(self, keys)

    def key_index(self, on: List[str], table: str = "table") -> Dict[Tuple[Any, ...], int]:
        """Map each key tuple to its row; raises JoinKeyCollision on a repeat."""
        key_cols = [self._data[k] for k in on]
        index = {}
        for i in range(self._length):
            kt = tuple(col[i] for col in key_cols)
            if kt in index:
                raise JoinKeyCollision(kt, table)
            index[kt] = i
        return index

    def join(self, other: 'DataFrame', on: Union[str, List[str]], how: str = 'inner',
             validate: bool = True) -> 'DataFrame':
        """
        Hash join on one or more columns shared by both frames.

        Output rows follow the order of the left frame. Non-key columns of
        ``other`` are appended, prefixed with ``r_`` when the name is taken.
        With ``validate`` set, a repeated key on either side raises
        JoinKeyCollision instead of fanning out.
        """
        keys = [on] if isinstance(on, str) else list(on)

        for k in keys:
            if k not in self.columns:
                raise ValueError(f"Left join key '{k}' not found in left DataFrame.")
            if k not in other.columns:
                raise ValueError(f"Right join key '{k}' not found in right DataFrame.")

        if how not in ('inner', 'left'):
            raise NotImplementedError(f"Join type '{how}' not supported. Use 'inner' or 'left'.")

        right_map: Dict[Tuple[Any, ...], List[int]] = {}
        right_key_cols = [other._data[k] for k in keys]
        for j in range(other._num_rows):
            rk = tuple(col[j] for col in right_key_cols)
            if any(v is None for v in rk):
                continue
            if validate and rk in right_map:
                raise JoinKeyCollision(rk, "right table")
            right_map.setdefault(rk, []).append(j)

        if validate:
            self.key_index(keys, "left table")

        right_prefix = "r_"
        right_cols = [c for c in other.columns if c not in keys]
        out_names = {c: (right_prefix + c if c in self._data else c) for c in right_cols}

        out = {c: [] for c in self.columns}
        for c in right_cols:
            out[out_names[c]] = []

        left_key_cols = [self._data[k] for k in keys]
        for i in range(self._num_rows):
            lk = tuple(col[i] for col in left_key_cols)
            if lk in right_map:
                for j in right_map[lk]:
                    for c in self.columns:
                        out[c].append(self._data[c][i])
                    for c in right_cols:
                        out[out_names[c]].append(other._data[c][j])
            elif how == 'left':
                for c in self.columns:
                    out[c].append(self._data[c][i])
                for c in right_cols:
                    out[out_names[c]].append(None)

        return DataFrame(out)
