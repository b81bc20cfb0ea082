"""
소스 모델 구축 모듈.

tree-sitter AST를 순회하여 분류기의 입력이 되는 SourceModel(읽기 전용 스냅샷)을 만든다.

추출 대상:
- 클래스/인터페이스/enum/record/어노테이션 타입 선언 (중첩 포함)
- 필드 선언 (선언 타입, 수정자, 어노테이션 원문)
- 메서드 선언 (반환 타입, 파라미터, 어노테이션, 본문의 메서드 호출)
- 상위 클래스 / 구현 인터페이스

2단계 처리:
    1단계: 모든 파일을 파싱하고 패키지별로 선언된 타입 이름을 수집
    2단계: 파일별로 타입을 추출하면서 타입 이름을 FQN으로 해석
          (같은 패키지의 다른 파일에 선언된 타입도 해석하기 위해 1단계가 필요)

타입 이름 해석 전략 (우선순위):
1. 기본형 (int, boolean, void 등) → 그대로
2. 명시적 import → import된 FQN
3. 같은 파일에 선언된 타입 (중첩 포함)
4. 같은 패키지에 선언된 타입
5. 와일드카드 import 패키지에 선언된 타입 (분석 대상 안에 있거나, 마커 테이블 등 알려진 FQN인 경우)
6. java.lang 기본 타입 (String, Long 등)
7. 소문자로 시작하는 점 표기 이름은 이미 FQN으로 간주
8. 해석 실패 → None (작성된 이름이 대신 사용된다)

메서드 호출의 선언 타입 해석:
- obj.method()  → obj가 지역변수/파라미터/필드면 그 선언 타입
- Type.method() → 대문자로 시작하면 정적 호출로 보고 Type을 해석
- this.f.method() → 필드 f의 선언 타입
- method()      → 현재 클래스
- 체이닝 호출 a.b().c()의 c는 선언 타입을 알 수 없어 None
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from tree_sitter import Node, Tree

from dbinfo.classify.markers import DEFAULT_MARKERS
from dbinfo.models import (
    CallExpression,
    FieldElement,
    MethodElement,
    Parameter,
    SourceModel,
    TypeElement,
    TypeRef,
)
from dbinfo.parsing.annotations import extract_annotations, extract_modifiers, node_text
from dbinfo.parsing.java_parser import JavaParser, first_error_line

logger = logging.getLogger(__name__)

# 노드 타입 → TypeElement.kind
TYPE_DECLARATIONS = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
    "record_declaration": "record",
    "annotation_type_declaration": "annotation",
}
_BODY_CONTAINERS = ("enum_body_declarations",)
_FIELD_DECLARATIONS = ("field_declaration", "constant_declaration")
_PRIMITIVE_TYPES = ("integral_type", "floating_point_type", "boolean_type", "void_type")
_PRIMITIVE_NAMES = {"byte", "short", "int", "long", "char", "float", "double", "boolean", "void"}
_LITERAL_TYPES = {
    "string_literal",
    "character_literal",
    "decimal_integer_literal",
    "hex_integer_literal",
    "octal_integer_literal",
    "binary_integer_literal",
    "decimal_floating_point_literal",
    "true",
    "false",
    "null_literal",
}
_JAVA_LANG = {
    "Object", "String", "Boolean", "Byte", "Character", "Short", "Integer", "Long",
    "Float", "Double", "Number", "Void", "Math", "System", "Thread", "Runnable",
    "Iterable", "Comparable", "CharSequence", "StringBuilder", "Enum", "Record", "Class",
    "Exception", "RuntimeException", "Error", "Throwable", "Override", "Deprecated",
}


class TypeResolver:
    """
    한 컴파일 단위(파일) 안에서 타입 이름을 FQN으로 해석한다.

    Args:
        package: 파일의 패키지명 (기본 패키지면 None)
        imports: 단순 이름 → FQN (명시적 import)
        wildcard_packages: import pkg.* 의 패키지 목록
        package_types: 패키지명 → 그 패키지에 선언된 최상위 타입 이름 집합 (1단계 결과)
        known_types: 분석 대상 밖이지만 존재를 아는 FQN (와일드카드 import 해석용)
    """

    def __init__(
        self,
        package: str | None,
        imports: dict[str, str],
        wildcard_packages: list[str],
        package_types: dict[str, set[str]],
        known_types: frozenset[str] = frozenset(),
    ):
        self.package = package
        self.imports = imports
        self.wildcard_packages = wildcard_packages
        self.package_types = package_types
        self.known_types = known_types
        # 같은 파일에 선언된 타입 (중첩 포함): 단순 이름 → FQN
        self.local_types: dict[str, str] = {}

    def qualify(self, name: str) -> str | None:
        """타입 이름을 FQN으로 해석한다. 실패하면 None."""
        if not name:
            return None
        if name in _PRIMITIVE_NAMES:
            return name

        head, _, rest = name.partition(".")
        suffix = f".{rest}" if rest else ""

        if head in self.imports:
            return self.imports[head] + suffix
        if head in self.local_types:
            return self.local_types[head] + suffix
        if head in self.package_types.get(self.package or "", set()):
            return _join(self.package, name)
        for pkg in self.wildcard_packages:
            if head in self.package_types.get(pkg, set()) or f"{pkg}.{head}" in self.known_types:
                return f"{pkg}.{name}"
        if head in _JAVA_LANG and not rest:
            return f"java.lang.{name}"
        if rest and head[:1].islower():
            return name
        return None


@dataclass
class _Unit:
    """파싱된 컴파일 단위 하나."""

    path: str
    source: bytes
    tree: Tree
    package: str | None = None
    type_names: list[str] = field(default_factory=list)


class SourceModelBuilder:
    """
    Java 소스 파일들로부터 SourceModel을 만드는 빌더.

    사용 예:
        builder = SourceModelBuilder()
        model = builder.build_from_files(sorted(root.rglob("*.java")))
    """

    def __init__(self, parser: JavaParser | None = None, known_types: Iterable[str] | None = None):
        self.parser = parser or JavaParser()
        if known_types is None:
            known_types = (fqn for names in DEFAULT_MARKERS.values() for fqn in names)
        self.known_types = frozenset(known_types)

    def build_from_files(self, files: Iterable[Path]) -> SourceModel:
        """
        파일 목록을 파싱하여 SourceModel을 만든다.

        Raises:
            OSError: 파일을 읽을 수 없는 경우
        """
        units: list[_Unit] = []
        for path in files:
            tree, source = self.parser.parse_file(path)
            units.append(_Unit(path=str(path), source=source, tree=tree))
        return self._build(units)

    def build_from_sources(self, sources: Iterable[tuple[str, bytes | str]]) -> SourceModel:
        """(경로 라벨, 소스) 쌍들로부터 SourceModel을 만든다. 테스트용."""
        units: list[_Unit] = []
        for label, text in sources:
            tree, source = self.parser.parse_source(text)
            units.append(_Unit(path=label, source=source, tree=tree))
        return self._build(units)

    # ── 1단계: 패키지별 타입 이름 수집 ──────────────────────

    def _build(self, units: list[_Unit]) -> SourceModel:
        package_types: dict[str, set[str]] = defaultdict(set)
        for unit in units:
            root = unit.tree.root_node
            if root.has_error:
                logger.warning(
                    "Syntax errors in %s (first at line %s); extracting what is parseable",
                    unit.path,
                    first_error_line(unit.tree),
                )
            unit.package = _extract_package(root, unit.source)
            for child in root.children:
                if child.type in TYPE_DECLARATIONS:
                    name_node = child.child_by_field_name("name")
                    if name_node is not None:
                        unit.type_names.append(node_text(name_node, unit.source))
            package_types[unit.package or ""].update(unit.type_names)

        # ── 2단계: 타입 추출 ──────────────────────────────
        types: list[TypeElement] = []
        for unit in units:
            types.extend(self._extract_unit(unit, package_types))

        logger.info("Types in model: %d (from %d files)", len(types), len(units))
        return SourceModel(types=types)

    def _extract_unit(self, unit: _Unit, package_types: dict[str, set[str]]) -> list[TypeElement]:
        root = unit.tree.root_node
        imports, wildcards = _extract_imports(root, unit.source)
        resolver = TypeResolver(unit.package, imports, wildcards, package_types, self.known_types)

        # 같은 파일의 타입(중첩 포함)을 먼저 등록해 두어야 전방 참조도 해석된다
        for _, qualified in _iter_type_declarations(root, unit.source, unit.package):
            simple = qualified.rsplit(".", 1)[-1]
            resolver.local_types.setdefault(simple, qualified)

        types: list[TypeElement] = []
        for child in root.children:
            if child.type in TYPE_DECLARATIONS:
                self._extract_type(child, unit, resolver, unit.package, types)
        return types

    # ── 타입 선언 ────────────────────────────────────────

    def _extract_type(
        self,
        node: Node,
        unit: _Unit,
        resolver: TypeResolver,
        enclosing: str | None,
        out: list[TypeElement],
    ) -> None:
        """
        타입 선언 하나를 TypeElement로 만들어 out에 추가하고, 중첩 타입을 재귀 처리한다.

        바깥 타입이 항상 중첩 타입보다 먼저 추가된다 (열거 순서 = 선언 순서).
        """
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        simple_name = node_text(name_node, unit.source)
        qualified = _join(enclosing, simple_name)
        source = unit.source

        super_class: TypeRef | None = None
        super_interfaces: list[TypeRef] = []
        for child in node.children:
            if child.type == "superclass":
                type_nodes = child.named_children
                if type_nodes:
                    super_class = self._type_ref(type_nodes[-1], source, resolver)
            elif child.type in ("super_interfaces", "extends_interfaces"):
                super_interfaces.extend(
                    self._type_ref(t, source, resolver) for t in _type_list(child)
                )

        fields: list[FieldElement] = []
        nested: list[Node] = []

        # record의 컴포넌트는 private final 필드로 취급한다
        if node.type == "record_declaration":
            params = node.child_by_field_name("parameters")
            if params is not None:
                for p in self._parameters(params, source, resolver):
                    fields.append(FieldElement(
                        name=p.name,
                        declared_type=p.declared_type,
                        modifiers=["private", "final"],
                    ))

        body = node.child_by_field_name("body")
        if body is not None:
            self._collect_members(body, unit, resolver, fields, nested)

        element = TypeElement(
            kind=TYPE_DECLARATIONS[node.type],
            qualified_name=qualified,
            simple_name=simple_name,
            package_name=unit.package,
            modifiers=extract_modifiers(node, source),
            annotations=extract_annotations(node, source, resolver.qualify),
            super_class=super_class,
            super_interfaces=super_interfaces,
            fields=fields,
            methods=[],
            file_path=unit.path,
        )
        # 메서드 본문의 this/super 호출 해석에 필드와 상위 타입 정보가 필요하므로 나중에 채운다
        if body is not None:
            element.methods = self._extract_methods(body, unit, resolver, element)
        out.append(element)

        for child in nested:
            self._extract_type(child, unit, resolver, qualified, out)

    def _collect_members(
        self,
        body: Node,
        unit: _Unit,
        resolver: TypeResolver,
        fields: list[FieldElement],
        nested: list[Node],
    ) -> None:
        """클래스 본문에서 필드와 중첩 타입을 선언 순서대로 수집한다."""
        for member in body.named_children:
            if member.type in _FIELD_DECLARATIONS:
                fields.extend(self._extract_fields(member, unit.source, resolver))
            elif member.type in TYPE_DECLARATIONS:
                nested.append(member)
            elif member.type in _BODY_CONTAINERS:
                # enum 본문의 ';' 이후 선언부
                self._collect_members(member, unit, resolver, fields, nested)

    def _extract_fields(self, node: Node, source: bytes, resolver: TypeResolver) -> list[FieldElement]:
        """
        필드 선언 하나에서 FieldElement들을 만든다.

        `private int a, b;` 처럼 선언자가 여러 개면 각각 하나의 필드가 된다.
        어노테이션과 수정자는 모든 선언자가 공유한다.
        """
        type_node = node.child_by_field_name("type")
        declared_type = self._type_ref(type_node, source, resolver) if type_node is not None else None
        annotations = extract_annotations(node, source, resolver.qualify)
        modifiers = extract_modifiers(node, source)

        fields: list[FieldElement] = []
        for declarator in node.children_by_field_name("declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                continue
            fields.append(FieldElement(
                name=node_text(name_node, source),
                declared_type=declared_type,
                modifiers=modifiers,
                annotations=annotations,
            ))
        return fields

    # ── 메서드 선언 ──────────────────────────────────────

    def _extract_methods(
        self,
        body: Node,
        unit: _Unit,
        resolver: TypeResolver,
        owner: TypeElement,
    ) -> list[MethodElement]:
        methods: list[MethodElement] = []
        for member in body.named_children:
            if member.type == "method_declaration":
                methods.append(self._extract_method(member, unit, resolver, owner))
            elif member.type in _BODY_CONTAINERS:
                methods.extend(self._extract_methods(member, unit, resolver, owner))
        return methods

    def _extract_method(
        self,
        node: Node,
        unit: _Unit,
        resolver: TypeResolver,
        owner: TypeElement,
    ) -> MethodElement:
        source = unit.source
        name_node = node.child_by_field_name("name")
        type_node = node.child_by_field_name("type")
        params_node = node.child_by_field_name("parameters")
        body = node.child_by_field_name("body")

        parameters = self._parameters(params_node, source, resolver) if params_node is not None else []
        calls: list[CallExpression] = []
        if body is not None:
            # 변수 이름 → 선언 타입 (필드 < 파라미터 < 지역변수 순으로 덮어씀)
            scope: dict[str, TypeRef] = {
                f.name: f.declared_type for f in owner.fields if f.declared_type is not None
            }
            scope.update({p.name: p.declared_type for p in parameters if p.declared_type is not None})
            self._collect_locals(body, source, resolver, scope)
            self._collect_calls(body, source, resolver, owner, scope, calls)

        return MethodElement(
            name=node_text(name_node, source) if name_node is not None else "",
            return_type=self._type_ref(type_node, source, resolver) if type_node is not None else None,
            parameters=parameters,
            modifiers=extract_modifiers(node, source),
            annotations=extract_annotations(node, source, resolver.qualify),
            calls=calls,
            has_body=body is not None,
        )

    def _parameters(self, node: Node, source: bytes, resolver: TypeResolver) -> list[Parameter]:
        """
        formal_parameters에서 파라미터 목록을 추출한다.

        가변 인수(String... args)는 spread_parameter로 파싱되며,
        이름이 variable_declarator 안에 들어 있다.
        """
        params: list[Parameter] = []
        for child in node.named_children:
            if child.type not in ("formal_parameter", "spread_parameter"):
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                declarator = _find_child(child, "variable_declarator")
                name_node = declarator.child_by_field_name("name") if declarator is not None else None
            if name_node is None:
                continue
            type_node = child.child_by_field_name("type") or _first_type_child(child)
            params.append(Parameter(
                name=node_text(name_node, source),
                declared_type=self._type_ref(type_node, source, resolver) if type_node is not None else None,
            ))
        return params

    def _collect_locals(
        self,
        node: Node,
        source: bytes,
        resolver: TypeResolver,
        scope: dict[str, TypeRef],
    ) -> None:
        """
        메서드 본문의 지역변수 선언을 재귀적으로 수집한다.

        블록 스코프는 구분하지 않는다 (같은 이름이면 나중 선언이 이긴다).
        `var`로 선언된 변수는 타입을 알 수 없으므로 건너뛴다.
        """
        if node.type in ("local_variable_declaration", "resource", "enhanced_for_statement"):
            type_node = node.child_by_field_name("type")
            if type_node is not None and node_text(type_node, source) != "var":
                type_ref = self._type_ref(type_node, source, resolver)
                if node.type == "local_variable_declaration":
                    for declarator in node.children_by_field_name("declarator"):
                        name_node = declarator.child_by_field_name("name")
                        if name_node is not None:
                            scope[node_text(name_node, source)] = type_ref
                else:
                    name_node = node.child_by_field_name("name")
                    if name_node is not None:
                        scope[node_text(name_node, source)] = type_ref

        for child in node.named_children:
            self._collect_locals(child, source, resolver, scope)

    def _collect_calls(
        self,
        node: Node,
        source: bytes,
        resolver: TypeResolver,
        owner: TypeElement,
        scope: dict[str, TypeRef],
        calls: list[CallExpression],
    ) -> None:
        """
        재귀적으로 method_invocation 노드를 수집한다 (전위 순회, 중복 제거 없음).

        method_invocation AST 구조:
            method_invocation
            ├── object    (호출 대상, 없을 수 있음)
            ├── name      (메서드명)
            └── arguments (argument_list)
        """
        if node.type == "method_invocation":
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                object_node = node.child_by_field_name("object")
                calls.append(CallExpression(
                    declaring_type=self._declaring_type(object_node, source, resolver, owner, scope),
                    member=node_text(name_node, source),
                    first_argument=_first_literal_argument(node.child_by_field_name("arguments"), source),
                ))

        for child in node.named_children:
            self._collect_calls(child, source, resolver, owner, scope, calls)

    def _declaring_type(
        self,
        object_node: Node | None,
        source: bytes,
        resolver: TypeResolver,
        owner: TypeElement,
        scope: dict[str, TypeRef],
    ) -> str | None:
        """호출 대상 표현식으로부터 선언 타입 이름을 추정한다. 알 수 없으면 None."""
        if object_node is None or object_node.type == "this":
            return owner.qualified_name
        if object_node.type == "super":
            return owner.super_class.best_name if owner.super_class else None

        if object_node.type == "identifier":
            name = node_text(object_node, source)
            if name in scope:
                return scope[name].best_name
            if name[:1].isupper():
                # 정적 호출: Type.method()
                return resolver.qualify(name) or name
            return None

        if object_node.type == "field_access":
            target = object_node.child_by_field_name("object")
            field_node = object_node.child_by_field_name("field")
            if target is not None and target.type == "this" and field_node is not None:
                declared = next(
                    (f.declared_type for f in owner.fields if f.name == node_text(field_node, source)),
                    None,
                )
                return declared.best_name if declared else None
            # java.sql.DriverManager.getConnection() 처럼 FQN으로 쓴 정적 호출
            text = node_text(object_node, source)
            last = text.rsplit(".", 1)[-1]
            if last[:1].isupper() and all(part.isidentifier() for part in text.split(".")):
                return resolver.qualify(text) or text
            return None

        if object_node.type == "object_creation_expression":
            type_node = object_node.child_by_field_name("type")
            if type_node is not None:
                return self._type_ref(type_node, source, resolver).best_name
        return None

    # ── 타입 참조 ────────────────────────────────────────

    def _type_ref(self, node: Node, source: bytes, resolver: TypeResolver) -> TypeRef:
        """
        타입 노드를 TypeRef로 변환한다.

        - generic_type: List<Invoice> → TypeRef(name="List", arguments=[Invoice])
        - array_type: byte[] → TypeRef(name="byte[]")
        - 와일드카드: ? extends Item → Item
        """
        kind = node.type
        if kind in _PRIMITIVE_TYPES:
            text = node_text(node, source)
            return TypeRef(name=text, qualified_name=text)

        if kind == "generic_type":
            base = node.named_children[0]
            base_ref = self._type_ref(base, source, resolver)
            arguments: list[TypeRef] = []
            type_args = _find_child(node, "type_arguments")
            if type_args is not None:
                for arg in type_args.named_children:
                    if arg.type == "wildcard":
                        bound = [c for c in arg.named_children if c.type not in ("annotation", "marker_annotation")]
                        if not bound:
                            continue
                        arg = bound[-1]
                    arguments.append(self._type_ref(arg, source, resolver))
            return TypeRef(name=base_ref.name, qualified_name=base_ref.qualified_name, arguments=arguments)

        if kind == "array_type":
            element_node = node.child_by_field_name("element")
            if element_node is not None:
                element = self._type_ref(element_node, source, resolver)
                return TypeRef(
                    name=element.name + "[]",
                    qualified_name=element.qualified_name + "[]" if element.qualified_name else None,
                    arguments=element.arguments,
                )

        if kind == "annotated_type":
            inner = [c for c in node.named_children if c.type not in ("annotation", "marker_annotation")]
            if inner:
                return self._type_ref(inner[-1], source, resolver)

        text = node_text(node, source)
        return TypeRef(name=text, qualified_name=resolver.qualify(text))


# ── 모듈 수준 헬퍼 ───────────────────────────────────────


def _join(prefix: str | None, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _find_child(node: Node, child_type: str) -> Node | None:
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def _first_type_child(node: Node) -> Node | None:
    """spread_parameter처럼 type 필드가 없는 노드에서 첫 번째 타입 노드를 찾는다."""
    for child in node.named_children:
        if child.type in _PRIMITIVE_TYPES or child.type in (
            "type_identifier", "scoped_type_identifier", "generic_type", "array_type",
        ):
            return child
    return None


def _type_list(node: Node) -> list[Node]:
    """super_interfaces / extends_interfaces 아래 type_list의 타입 노드들."""
    type_list = _find_child(node, "type_list")
    return list(type_list.named_children) if type_list is not None else []


def _extract_package(root: Node, source: bytes) -> str | None:
    """
    package 선언에서 패키지명을 반환한다.

    AST 구조:
        program
        └── package_declaration
            └── scoped_identifier ("com.example.billing") 또는 identifier
    """
    for child in root.children:
        if child.type == "package_declaration":
            for sub in child.children:
                if sub.type in ("scoped_identifier", "identifier"):
                    return node_text(sub, source)
    return None


def _extract_imports(root: Node, source: bytes) -> tuple[dict[str, str], list[str]]:
    """
    import 선언을 (단순 이름 → FQN, 와일드카드 패키지 목록)으로 정리한다.

    static import는 타입 해석에 쓰이지 않으므로 제외한다.
    """
    imports: dict[str, str] = {}
    wildcards: list[str] = []
    for child in root.children:
        if child.type != "import_declaration":
            continue
        if any(c.type == "static" for c in child.children):
            continue
        name_node = next((c for c in child.children if c.type in ("scoped_identifier", "identifier")), None)
        if name_node is None:
            continue
        name = node_text(name_node, source)
        if any(c.type == "asterisk" for c in child.children):
            wildcards.append(name)
        else:
            imports[name.rsplit(".", 1)[-1]] = name
    return imports, wildcards


def _iter_type_declarations(node: Node, source: bytes, enclosing: str | None):
    """파일 안의 모든 타입 선언을 (노드, FQN)으로 전위 순회한다."""
    for child in node.named_children:
        if child.type in TYPE_DECLARATIONS:
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            qualified = _join(enclosing, node_text(name_node, source))
            yield child, qualified
            body = child.child_by_field_name("body")
            if body is not None:
                yield from _iter_type_declarations(body, source, qualified)
        elif child.type in _BODY_CONTAINERS:
            yield from _iter_type_declarations(child, source, enclosing)


def _first_literal_argument(arguments: Node | None, source: bytes) -> str | None:
    """첫 번째 인수가 리터럴이면 그 원문을 반환한다."""
    if arguments is None:
        return None
    args = [a for a in arguments.named_children if a.type not in ("line_comment", "block_comment")]
    if not args or args[0].type not in _LITERAL_TYPES:
        return None
    return node_text(args[0], source)
