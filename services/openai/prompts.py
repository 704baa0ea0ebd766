"""Prompt builders for screenshot extraction and reply coaching."""

from __future__ import annotations

from services.providers import PromptContext


def vision_system_prompt() -> str:
	"""Return the extraction instruction demanding a single JSON object."""
	return "\n".join(
		[
			"你是截图OCR与聊天语义抽取器。",
			"请只返回一个JSON对象，不要markdown。",
			"聊天气泡在左侧的是对方(left)，在右侧的是我方(right)，无法判断时用unknown。",
			"JSON schema:",
			'{"messages":[{"text":string,"side":"left"|"right"|"unknown","order":number}],'
			'"transcript_lines":string[],"entities":string[],"emotion_cues":string[],"risk_points":string[]}',
		]
	)


def vision_user_prompt(strip_count: int, part: int = 1, parts: int = 1) -> str:
	"""Return the user instruction; long screenshots arrive as ordered overlapping strips."""
	lines = ["请提取截图里的可读聊天文本（按从上到下的顺序），标注每条消息的气泡方向，并提取关键实体、情绪线索、风险点。"]
	if parts > 1:
		lines.append(f"这是同一张长截图的第{part}/{parts}部分，只提取本部分出现的内容。")
	if strip_count > 1:
		lines.append(f"本部分被切成了{strip_count}段，按顺序给出，相邻两段有少量重叠，重叠部分的消息只保留一次。")
	return "\n".join(lines)


def reasoning_system_prompt() -> str:
	"""Return the coaching system prompt with the structured answer schema."""
	return "\n".join(
		[
			"你是高情商沟通教练，擅长聊天截图分析与可直接发送的回复生成。",
			"你必须基于给定证据回答，禁止编造截图中不存在的信息。",
			"返回严格 JSON，不要 markdown。",
			"JSON schema:",
			'{"analysis":{"emotion":string,"core_need":string,"risk_point":string},',
			'"reply_options":[{"style":"温和"|"坚定"|"幽默","text":string}],',
			'"best_reply":string,"why":string,',
			'"followups":string[],"confidence":number,"is_speculative":boolean,',
			'"analysis_steps":string[],',
			'"speaker_split":{"other_lines":string[],"self_lines":string[],"mapping_rule":string,'
			'"confidence":number,"low_confidence_reason":string},',
			'"intent":{"other_intent":string,"self_intent":string}}',
		]
	)


def reasoning_user_prompt(context: PromptContext) -> str:
	"""Return the user block grounding the model in evidence and the speaker split."""
	if context.relevant_facts:
		evidence = "\n".join(
			f"{index}) [image:{fact.image_id}] {fact.text}"
			for index, fact in enumerate(context.relevant_facts, start=1)
		)
	else:
		evidence = "(no evidence)"

	split = context.speaker_split
	other = "\n".join(split.other_lines) if split.other_lines else "(无)"
	mine = "\n".join(split.self_lines) if split.self_lines else "(无)"

	return "\n\n".join(
		[
			f"任务模式: {context.mode or 'hq_reply'}",
			f"用户问题: {context.question}",
			f"相关证据:\n{evidence}",
			f"对方发言(左侧气泡):\n{other}",
			f"我方发言(右侧气泡):\n{mine}",
			f"说话人归属置信度: {split.confidence:.2f}",
			f"总证据条数: {context.total_facts}",
			"要求: 输出可直接复制发送的短句。",
		]
	)
