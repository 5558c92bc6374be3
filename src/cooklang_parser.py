#!/usr/bin/env python3
"""
Recipe text parser for Cooklang-style recipe documents.
Parses metadata, sections, steps, ingredients (including references to
other recipes), cookware and timers, collecting every syntax error found.
"""

import re
from typing import Dict, List, Tuple, Optional, Union, Any, Iterator
from dataclasses import dataclass, field, replace

import yaml

from recipe_quantity import Quantity, parse_amount, parse_number, normalize_unit
from report_config import RECIPE_EXTENSION
from report_errors import RecipeParseError, MalformedIngredientError

RECIPE_SUFFIX = "." + RECIPE_EXTENSION


def normalize_reference_path(path: str) -> str:
    """Canonical form of a reference: no leading './' or '/', no extension."""
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.lstrip("/")
    if path.endswith(RECIPE_SUFFIX):
        path = path[: -len(RECIPE_SUFFIX)]
    return path


@dataclass
class Ingredient:
    """Ingredient occurrence in a recipe."""
    name: str
    quantity: Optional[Quantity] = None
    alias: Optional[str] = None
    note: Optional[str] = None
    reference_path: Optional[str] = None
    fixed: bool = False

    @property
    def reference(self) -> bool:
        return self.reference_path is not None

    @property
    def display_name(self) -> str:
        return self.alias or self.name

    def scaled(self, factor: float) -> "Ingredient":
        if self.quantity is None or self.fixed:
            return self
        return replace(self, quantity=self.quantity.scaled(factor))

    @classmethod
    def from_mapping(cls, data: Any) -> "Ingredient":
        """
        Validate template-supplied ingredient data.

        Args:
            data: Ingredient instance or mapping with name, alias, quantity,
                reference and reference_path keys

        Returns:
            Ingredient
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise MalformedIngredientError(f"Ingredient must be a mapping, got {type(data).__name__}", data)

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise MalformedIngredientError("Ingredient name must be a non-empty string", data)

        quantity = data.get("quantity")
        if isinstance(quantity, dict):
            if "value" not in quantity:
                raise MalformedIngredientError(f"Quantity for '{name}' has no value", data)
            quantity = Quantity(parse_amount(quantity["value"]), quantity.get("unit"))
        elif quantity is not None and not isinstance(quantity, Quantity):
            quantity = Quantity(parse_amount(quantity))

        reference_path = data.get("reference_path")
        if data.get("reference") and reference_path is None:
            reference_path = name
        if reference_path is not None:
            if not isinstance(reference_path, str) or not reference_path.strip():
                raise MalformedIngredientError(f"Reference '{name}' has no path", data)
            reference_path = normalize_reference_path(reference_path)

        return cls(
            name=name,
            quantity=quantity,
            alias=data.get("alias"),
            note=data.get("note"),
            reference_path=reference_path,
        )

    def __str__(self) -> str:
        if self.quantity is None:
            return self.display_name
        return f"{self.quantity} {self.display_name}"


@dataclass
class Cookware:
    """Cookware occurrence in a recipe."""
    name: str
    quantity: Optional[Quantity] = None
    alias: Optional[str] = None
    note: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.alias or self.name

    def __str__(self) -> str:
        return self.display_name


@dataclass
class Timer:
    """Timer occurrence in a recipe."""
    name: Optional[str] = None
    quantity: Optional[Quantity] = None

    def __str__(self) -> str:
        if self.name and self.quantity is not None:
            return f"{self.name} for {self.quantity}"
        if self.name:
            return self.name
        if self.quantity is not None:
            return str(self.quantity)
        return "timer"


Item = Union[str, Ingredient, Cookware, Timer]


@dataclass
class Step:
    """Numbered step made of text and recipe components."""
    number: int
    items: List[Item] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(str(item) for item in self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return f"{self.number}. {self.text}"


@dataclass
class TextBlock:
    """Unnumbered prose inside a section."""
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass
class Section:
    """Named (or unnamed) group of steps and text."""
    name: Optional[str] = None
    content: List[Union[Step, TextBlock]] = field(default_factory=list)

    @property
    def steps(self) -> List[Step]:
        return [c for c in self.content if isinstance(c, Step)]

    def __iter__(self):
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)

    def __str__(self) -> str:
        parts = [f"= {self.name or 'Recipe'}\n\n"]
        parts.extend(str(content) for content in self.content)
        return "".join(parts)


class Metadata:
    """Recipe metadata from YAML front matter and '>>' lines."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def servings(self) -> Optional[float]:
        """Declared servings as a number, if any."""
        value = self._data.get("servings")
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, list) and value:
            value = value[0]
        tokens = str(value).replace("|", " ").split()
        if not tokens:
            return None
        return parse_number(tokens[0])

    def yield_quantity(self) -> Optional[Quantity]:
        """Declared yield as a quantity; the amount must be numeric."""
        value = self._data.get("yield")
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, dict):
            amount = value.get("amount", value.get("value"))
            if amount is None:
                return None
            quantity = Quantity(parse_amount(amount), value.get("unit"))
            return quantity if quantity.is_number else None
        if isinstance(value, (int, float)):
            return Quantity(float(value))

        text = str(value).strip()
        if "%" in text:
            amount, _, unit = text.partition("%")
        else:
            # a trailing '-2' belongs to the amount, not the unit
            match = re.match(r'^(\d+(?:\s+\d+/\d+|/\d+|\.\d+)?(?:\s*[-–]\s*[\d./]+)?)\s*(.*)$', text)
            if not match:
                return None
            amount, unit = match.group(1), match.group(2)
        quantity = Quantity(parse_amount(amount), unit)
        return quantity if quantity.is_number else None

    def keys(self):
        return self._data.keys()

    def items(self):
        return self._data.items()

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __str__(self) -> str:
        if not self._data:
            return ""
        dumped = yaml.safe_dump(self._data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        return f"---\n{dumped}---\n"


@dataclass
class ParsedRecipe:
    """Structured recipe produced by the parser."""
    metadata: Metadata = field(default_factory=Metadata)
    sections: List[Section] = field(default_factory=list)
    ingredients: List[Ingredient] = field(default_factory=list)
    cookware: List[Cookware] = field(default_factory=list)
    timers: List[Timer] = field(default_factory=list)
    name: Optional[str] = None

    @property
    def title(self) -> str:
        return self.metadata.get("title") or self.name or "recipe"

    def scaled(self, factor: float) -> "ParsedRecipe":
        """Copy with every ingredient quantity multiplied by factor."""
        if factor == 1.0:
            return self

        mapping = {}
        ingredients = []
        for ingredient in self.ingredients:
            scaled = ingredient.scaled(factor)
            mapping[id(ingredient)] = scaled
            ingredients.append(scaled)

        sections = []
        for section in self.sections:
            content = []
            for block in section.content:
                if isinstance(block, Step):
                    block = Step(block.number, [mapping.get(id(item), item) for item in block.items])
                content.append(block)
            sections.append(Section(section.name, content))

        return replace(self, sections=sections, ingredients=ingredients)


@dataclass
class ParseResult:
    """Parser output: the recipe (when no errors) plus all diagnostics."""
    recipe: Optional[ParsedRecipe]
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def into_result(self) -> Tuple[ParsedRecipe, List[str]]:
        """Return (recipe, warnings) or raise RecipeParseError."""
        if self.errors or self.recipe is None:
            raise RecipeParseError(self.errors or ["no recipe produced"], self.warnings)
        return self.recipe, self.warnings


class CooklangParser:
    """Parser for Cooklang recipe text."""

    def __init__(self):
        self._compile_patterns()

    def _compile_patterns(self):
        """Compile regex patterns for parsing."""
        self.block_comment_pattern = re.compile(r'\[-.*?-\]', re.DOTALL)
        self.line_comment_pattern = re.compile(r'--.*$')
        self.section_pattern = re.compile(r'^=+\s*(.*?)\s*=*\s*$')
        self.metadata_line_pattern = re.compile(r'^>>\s*([^:]+?)\s*:\s*(.*)$')
        self.component_pattern = re.compile(
            r'''
            (?P<sigil>[@#~])
            (?:
                (?P<braced>[^@#~{}\n]*?)\{(?P<body>[^{}\n]*)\}
                |
                (?P<word>\.{1,2}/[^\s{}@#~]*[^\s{}@#~().,;:!?]|[^\s@#~{}()\[\].,;:!?"']+)
            )
            (?:\((?P<note>[^)\n]*)\))?
            ''',
            re.VERBOSE
        )
        self.unterminated_pattern = re.compile(r'[@#~][^@#~{}\n]*\{[^}\n]*$')

    def parse(self, text: str) -> ParseResult:
        """
        Parse recipe text.

        Args:
            text: Recipe source

        Returns:
            ParseResult with the recipe and every error and warning found
        """
        errors: List[str] = []
        warnings: List[str] = []

        metadata, body, first_line = self._split_front_matter(text, errors)
        body = self.block_comment_pattern.sub(lambda m: "\n" * m.group(0).count("\n"), body)

        recipe = ParsedRecipe(metadata=Metadata(metadata))
        current = Section()
        paragraph: List[Tuple[int, str]] = []

        def flush():
            if paragraph:
                self._add_paragraph(current, paragraph, recipe, errors, warnings)
                paragraph.clear()

        for offset, raw_line in enumerate(body.split("\n")):
            lineno = first_line + offset
            line = self.line_comment_pattern.sub("", raw_line).strip()

            if not line:
                flush()
                continue

            meta_match = self.metadata_line_pattern.match(line)
            if meta_match:
                flush()
                key, value = meta_match.group(1), meta_match.group(2).strip()
                if key in recipe.metadata:
                    warnings.append(f"line {lineno}: metadata key '{key}' redefined")
                recipe.metadata._data[key] = value
                continue

            section_match = self.section_pattern.match(line)
            if section_match:
                flush()
                if current.name is not None or current.content:
                    recipe.sections.append(current)
                current = Section(section_match.group(1) or None)
                continue

            paragraph.append((lineno, line))

        flush()
        if current.name is not None or current.content or not recipe.sections:
            recipe.sections.append(current)

        if errors:
            return ParseResult(None, errors, warnings)
        return ParseResult(recipe, errors, warnings)

    def _split_front_matter(self, text: str, errors: List[str]) -> Tuple[Dict[str, Any], str, int]:
        """Separate YAML front matter from the recipe body."""
        lines = text.split("\n")
        if not lines or lines[0].strip() != "---":
            return {}, text, 1

        for index in range(1, len(lines)):
            if lines[index].strip() == "---":
                front = "\n".join(lines[1:index])
                body = "\n".join(lines[index + 1:])
                try:
                    data = yaml.safe_load(front) or {}
                except yaml.YAMLError as e:
                    errors.append(f"invalid YAML front matter: {e}")
                    return {}, body, index + 2
                if not isinstance(data, dict):
                    errors.append("YAML front matter must be a mapping")
                    return {}, body, index + 2
                return {str(k): v for k, v in data.items()}, body, index + 2

        errors.append("line 1: unterminated YAML front matter")
        return {}, "", len(lines) + 1

    def _add_paragraph(self, section: Section, lines: List[Tuple[int, str]], recipe: ParsedRecipe,
                       errors: List[str], warnings: List[str]):
        """Turn a block of lines into a step or a text block."""
        if lines[0][1].startswith(">"):
            text = " ".join(line.lstrip(">").strip() for _, line in lines)
            section.content.append(TextBlock(text))
            return

        items: List[Item] = []
        for index, (lineno, line) in enumerate(lines):
            if index:
                items.append(" ")
            items.extend(self._parse_line(line, lineno, recipe, errors, warnings))

        merged: List[Item] = []
        for item in items:
            if isinstance(item, str) and merged and isinstance(merged[-1], str):
                merged[-1] += item
            else:
                merged.append(item)

        section.content.append(Step(len(section.steps) + 1, merged))

    def _parse_line(self, line: str, lineno: int, recipe: ParsedRecipe,
                    errors: List[str], warnings: List[str]) -> List[Item]:
        """Split one line into text and components."""
        if self.unterminated_pattern.search(line):
            errors.append(f"line {lineno}: unterminated '{{' in component")

        items: List[Item] = []
        position = 0
        for match in self.component_pattern.finditer(line):
            sigil = match.group("sigil")
            braced = match.group("braced")
            if sigil == "~" and braced is None:
                continue

            if match.start() > position:
                items.append(line[position:match.start()])
            position = match.end()

            component = self._build_component(match, lineno, errors, warnings)
            if component is None:
                items.append(match.group(0))
            elif isinstance(component, Ingredient):
                recipe.ingredients.append(component)
                items.append(component)
            elif isinstance(component, Cookware):
                recipe.cookware.append(component)
                items.append(component)
            else:
                recipe.timers.append(component)
                items.append(component)

        if position < len(line):
            items.append(line[position:])
        return items

    def _build_component(self, match: re.Match, lineno: int, errors: List[str],
                         warnings: List[str]) -> Optional[Union[Ingredient, Cookware, Timer]]:
        sigil = match.group("sigil")
        raw_name = (match.group("braced") if match.group("braced") is not None else match.group("word")).strip()
        body = match.group("body")
        note = match.group("note")
        note = note.strip() if note else None

        quantity, fixed = self._parse_body(body, lineno, errors, warnings)

        if sigil == "~":
            if quantity is None:
                warnings.append(f"line {lineno}: timer without a duration")
            return Timer(raw_name or None, quantity)

        if not raw_name:
            kind = "ingredient" if sigil == "@" else "cookware"
            errors.append(f"line {lineno}: {kind} without a name")
            return None

        name, _, alias = raw_name.partition("|")
        name, alias = name.strip(), alias.strip() or None

        if sigil == "#":
            return Cookware(name, quantity, alias, note)

        reference_path = None
        if name.startswith(("./", "../", "/")) or name.endswith(RECIPE_SUFFIX):
            reference_path = normalize_reference_path(name)
            name = reference_path.rsplit("/", 1)[-1]
            if not name:
                errors.append(f"line {lineno}: recipe reference without a path")
                return None

        return Ingredient(name, quantity, alias, note, reference_path, fixed)

    def _parse_body(self, body: Optional[str], lineno: int, errors: List[str],
                    warnings: List[str]) -> Tuple[Optional[Quantity], bool]:
        """Parse the '{amount%unit}' part of a component."""
        if body is None or not body.strip():
            return None, False

        body = body.strip()
        fixed = body.startswith("=")
        if fixed:
            body = body[1:].strip()

        if body.count("%") > 1:
            errors.append(f"line {lineno}: invalid quantity '{body}'")
            return None, fixed

        value, _, unit = body.partition("%")
        value = value.strip()
        if not value:
            errors.append(f"line {lineno}: quantity '{body}' has a unit but no amount")
            return None, fixed

        amount = parse_amount(value)
        unit = normalize_unit(unit)
        if isinstance(amount, str) and unit:
            warnings.append(f"line {lineno}: quantity '{value}' is not a number")
        return Quantity(amount, unit), fixed


_default_parser: Optional[CooklangParser] = None


def get_parser() -> CooklangParser:
    """Shared parser instance."""
    global _default_parser
    if _default_parser is None:
        _default_parser = CooklangParser()
    return _default_parser
