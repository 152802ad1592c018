"""Template structure block parsing.

Provides mixin for parsing {{define}}, {{template}} and {{block}}.
"""

from __future__ import annotations

from embedded_assets._types import Token, TokenType
from embedded_assets.environment.exceptions import ErrorCode
from embedded_assets.nodes import Block, Template, TemplateCall
from embedded_assets.nodes.structure import is_blank
from embedded_assets.parser.blocks.core import BlockStackMixin, describe


class TemplateStructureBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing template structure actions.

    Required Host Attributes:
        - All from BlockStackMixin
        - _definitions: dict[str, Template]
        - _parse_body: method
        - _parse_pipeline: method
    """

    _definitions: dict[str, Template]

    def _parse_template_name(self, keyword: str) -> str:
        if self._current.type != TokenType.STRING:
            raise self._error(
                f"Expected template name string after {{{{{keyword}}}}}, "
                f"got {describe(self._current)}",
                suggestion=f'Quote the name: {{{{{keyword} "name"}}}}',
            )
        return self._advance().value

    def _parse_define(self) -> None:
        """Parse {{define "name"}}...{{end}} and register the definition."""
        start = self._advance()  # consume 'define'
        if self._block_stack:
            raise self._error(
                "{{define}} is only allowed at the top level",
                start,
                suggestion="Move the {{define}} out of the enclosing action",
            )
        name = self._parse_template_name("define")
        self._expect(TokenType.ACTION_END)

        self._push_block("define", start)
        body = self._parse_body()
        self._consume_end_tag("define")
        self._pop_block()

        self._add_definition(
            Template(
                lineno=start.lineno,
                col_offset=start.col_offset,
                name=name,
                body=tuple(body),
                filename=self._filename,
            ),
            start,
        )

    def _parse_template_call(self) -> TemplateCall:
        """Parse {{template "name"}} or {{template "name" pipeline}}."""
        start = self._advance()  # consume 'template'
        name = self._parse_template_name("template")

        pipeline = None
        if not self._match(TokenType.ACTION_END):
            pipeline = self._parse_pipeline()
        self._expect(TokenType.ACTION_END)

        return TemplateCall(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=name,
            pipeline=pipeline,
        )

    def _parse_block_tag(self) -> Block:
        """Parse {{block "name" pipeline}}default{{end}}."""
        start = self._advance()  # consume 'block'
        name = self._parse_template_name("block")
        if self._match(TokenType.ACTION_END):
            raise self._error(
                "{{block}} requires a pipeline",
                suggestion=f'Pass the current data: {{{{block "{name}" .}}}}',
            )
        pipeline = self._parse_pipeline()
        self._expect(TokenType.ACTION_END)

        self._push_block("block", start)
        body = tuple(self._parse_body())
        self._consume_end_tag("block")
        self._pop_block()

        self._add_definition(
            Template(
                lineno=start.lineno,
                col_offset=start.col_offset,
                name=name,
                body=body,
                filename=self._filename,
            ),
            start,
        )
        return Block(
            lineno=start.lineno,
            col_offset=start.col_offset,
            name=name,
            pipeline=pipeline,
            body=body,
        )

    def _add_definition(self, template: Template, token: Token) -> None:
        """Register a definition; a blank body never replaces a real one."""
        existing = self._definitions.get(template.name)
        if existing is not None:
            if is_blank(template.body):
                return
            if not is_blank(existing.body):
                raise self._error(
                    f'Template "{template.name}" is defined twice '
                    f"(first at line {existing.lineno})",
                    token,
                    code=ErrorCode.DUPLICATE_DEFINITION,
                )
        self._definitions[template.name] = template
